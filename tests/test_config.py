import json

import pytest

from gator import config
from gator.config import Config


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return tmp_path


def test_config_file_path_in_home(home):
    assert config.config_file_path() == home / ".gatorconfig.json"


def test_to_json_uses_source_field_names():
    conf = Config(db_url="x", current_user_name="y")
    assert conf.to_json() == '{"db_url":"x","current_user_name":"y"}'


def test_to_json_escapes_html_characters():
    conf = Config(db_url="a<b>&c", current_user_name="")
    text = conf.to_json()
    assert "<" not in text and ">" not in text and "&" not in text
    assert Config.from_json(text) == conf


def test_json_round_trip():
    conf = Config(db_url="sqlite:///gator.db", current_user_name="älice")
    assert Config.from_json(conf.to_json()) == conf


def test_from_json_missing_fields_default_empty():
    assert Config.from_json('{"db_url":"d"}') == Config(db_url="d", current_user_name="")


def test_from_json_rejects_non_object():
    with pytest.raises(ValueError):
        Config.from_json("[1, 2]")


def test_from_json_rejects_invalid_json():
    with pytest.raises(json.JSONDecodeError):
        Config.from_json("{not json")


def test_read_missing_file_raises(home):
    with pytest.raises(FileNotFoundError):
        config.read()


def test_write_then_read(home):
    conf = Config(db_url="gator.db", current_user_name="bob")
    config.write_config(conf)
    assert config.read() == conf


def test_set_user_persists(home):
    conf = Config(db_url="gator.db")
    conf.set_user("alice")
    assert conf.current_user_name == "alice"
    assert config.read().current_user_name == "alice"
    conf.set_user("")
    assert config.read().current_user_name == ""