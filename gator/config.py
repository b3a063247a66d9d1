"""Reading and writing the user's JSON configuration file."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from gator.database import Queries

CONFIG_FILE_NAME = ".gatorconfig.json"

_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def config_file_path() -> Path:
    """Return the path of the configuration file in the home directory."""
    return Path.home() / CONFIG_FILE_NAME


@dataclass
class Config:
    """Database location and the name of the logged-in user."""

    db_url: str = ""
    current_user_name: str = ""

    def to_json(self) -> str:
        text = json.dumps(
            {"db_url": self.db_url, "current_user_name": self.current_user_name},
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return "".join(_JSON_ESCAPES.get(ch, ch) for ch in text)

    @classmethod
    def from_json(cls, text) -> "Config":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("config must be a JSON object")
        values = {}
        for key in ("db_url", "current_user_name"):
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise ValueError(f"config field {key!r} must be a string")
            values[key] = value
        return cls(**values)

    def set_user(self, user) -> None:
        """Record user as the current user and save the configuration."""
        self.current_user_name = user
        write_config(self)


@dataclass
class State:
    """What every command handler works with."""

    conf: Config
    queries: Queries


def write_config(conf: Config) -> None:
    config_file_path().write_text(conf.to_json(), encoding="utf-8")


def read() -> Config:
    return Config.from_json(config_file_path().read_text(encoding="utf-8"))