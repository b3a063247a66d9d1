"""Command-line entry point and the handlers behind each command."""

from __future__ import annotations

import functools
import sqlite3
import sys
import time
import uuid
from datetime import datetime, timedelta, timezone
from fractions import Fraction

from gator import config
from gator.command import Command, Commands
from gator.config import State
from gator.database import connect
from gator.models import User
from gator.rss import fetch_feed

_UNITS_NS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_MAX_NS = 2**63 - 1


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "300ms", "-1.5h" or "2h45m"."""
    original = text
    negative = False
    if text and text[0] in "+-":
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {original!r}")

    total = Fraction(0)
    while text:
        digits_end = 0
        while digits_end < len(text) and text[digits_end].isdigit():
            digits_end += 1
        whole = text[:digits_end]
        text = text[digits_end:]
        fraction = ""
        if text.startswith("."):
            text = text[1:]
            frac_end = 0
            while frac_end < len(text) and text[frac_end].isdigit():
                frac_end += 1
            fraction = text[:frac_end]
            text = text[frac_end:]
        if not whole and not fraction:
            raise ValueError(f"invalid duration {original!r}")

        unit_end = 0
        while unit_end < len(text) and text[unit_end] != "." and not text[unit_end].isdigit():
            unit_end += 1
        unit = text[:unit_end]
        text = text[unit_end:]
        if not unit:
            raise ValueError(f"missing unit in duration {original!r}")
        if unit not in _UNITS_NS:
            raise ValueError(f"unknown unit {unit!r} in duration {original!r}")

        value = Fraction(int(whole or "0"))
        if fraction:
            value += Fraction(int(fraction), 10 ** len(fraction))
        total += value * _UNITS_NS[unit]
        if total > _MAX_NS + (1 if negative else 0):
            raise ValueError(f"invalid duration {original!r}")

    nanoseconds = int(total)
    if negative:
        nanoseconds = -nanoseconds
    return timedelta(microseconds=nanoseconds / 1000)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _expect_args(cmd: Command, name: str, count: int) -> None:
    if len(cmd.args) != count:
        raise ValueError(
            f"unexpected number of args for {name} command. "
            f"Expected: {count}. Received: {len(cmd.args)}"
        )


def middleware_logged_in(handler):
    """Wrap a handler that needs the current user into an ordinary handler."""

    @functools.wraps(handler)
    def wrapper(state: State, cmd: Command):
        user = state.queries.get_user(state.conf.current_user_name)
        return handler(state, cmd, user)

    return wrapper


def scrape_feeds(state: State, user: User) -> None:
    """Fetch the user's stalest followed feed and print its item titles."""
    try:
        feed = state.queries.get_next_feed_to_fetch(user.id)
    except Exception as exc:
        print("Error getting next feed to fetch:", exc)
        return
    try:
        state.queries.mark_feed_fetched(_now(), feed.id)
    except Exception as exc:
        print("Error marking feed as fetched:", exc)
        return
    try:
        rss_feed = fetch_feed(feed.url)
    except Exception as exc:
        print("Error fetching feed:", exc)
        return
    for item in rss_feed.items:
        print(item.title)


def make_help_handler(commands: Commands):
    """Return a handler that lists the commands registered in commands."""

    def handler_help(state, cmd) -> None:
        print("Available commands: ")
        for name in commands.names():
            print(" -", name)
        print("")

    return handler_help


def handler_login(state: State, cmd: Command) -> None:
    _expect_args(cmd, "login", 1)
    user = state.queries.get_user(cmd.args[0])
    state.conf.set_user(user.name)
    print("Set User:", cmd.args[0])


def handler_register(state: State, cmd: Command) -> None:
    _expect_args(cmd, "register", 1)
    now = _now()
    user = state.queries.create_user(uuid.uuid4(), now, now, cmd.args[0])
    print("created user:", user)
    state.conf.set_user(cmd.args[0])


def handler_reset(state: State, cmd: Command) -> None:
    state.queries.drop_users()
    state.conf.set_user("")


def handler_users(state: State, cmd: Command) -> None:
    for user in state.queries.get_users():
        if user.name == state.conf.current_user_name:
            print("*", user.name, "(current)")
        else:
            print("*", user.name)


def handler_agg(state: State, cmd: Command, user: User) -> None:
    """Scrape feeds now and then once every interval, until interrupted."""
    _expect_args(cmd, "agg", 1)
    interval = parse_duration(cmd.args[0])
    if interval <= timedelta(0):
        raise ValueError("non-positive interval for agg")
    seconds = interval.total_seconds()
    next_tick = time.monotonic()
    while True:
        scrape_feeds(state, user)
        next_tick += seconds
        now = time.monotonic()
        if next_tick < now:
            # Ticks missed while scraping are dropped, not queued.
            next_tick += ((now - next_tick) // seconds + 1) * seconds
        time.sleep(next_tick - now)


def handler_add_feed(state: State, cmd: Command, user: User) -> None:
    _expect_args(cmd, "addfeed", 2)
    now = _now()
    feed = state.queries.create_feed(uuid.uuid4(), now, now, cmd.args[0], cmd.args[1], user.id)
    print("created feed:", feed)
    handler_follow(state, Command(name="follow", args=cmd.args[1:]), user)


def handler_feeds(state: State, cmd: Command) -> None:
    for entry in state.queries.get_feeds():
        print(entry.feed.name, ":", entry.feed.url)


def handler_follow(state: State, cmd: Command, user: User) -> None:
    _expect_args(cmd, "follow", 1)
    feed = state.queries.get_feed(cmd.args[0])
    now = _now()
    follow = state.queries.create_feed_follow(uuid.uuid4(), now, now, user.id, feed.id)
    print("created feed follow:", follow.user_name, "-", follow.feed_name)


def handler_following(state: State, cmd: Command, user: User) -> None:
    for follow in state.queries.get_users_feed_follows(user.name):
        print(follow.feed_name, "-", follow.feed_url)


def handler_unfollow(state: State, cmd: Command, user: User) -> None:
    _expect_args(cmd, "unfollow", 1)
    for follow in state.queries.delete_users_feed_follows_by_url(user.name, cmd.args[0]):
        print(follow.feed_id)


def build_commands() -> Commands:
    """Return the registry of every command the program understands."""
    commands = Commands()
    commands.register("help", make_help_handler(commands))
    commands.register("login", handler_login)
    commands.register("register", handler_register)
    commands.register("reset", handler_reset)
    commands.register("users", handler_users)
    commands.register("agg", middleware_logged_in(handler_agg))
    commands.register("addfeed", middleware_logged_in(handler_add_feed))
    commands.register("feeds", handler_feeds)
    commands.register("follow", middleware_logged_in(handler_follow))
    commands.register("following", middleware_logged_in(handler_following))
    commands.register("unfollow", middleware_logged_in(handler_unfollow))
    return commands


def main(argv=None) -> int:
    """Run the command named by argv[0] with the rest as its arguments."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        conf = config.read()
    except (OSError, ValueError) as exc:
        print("ERROR: Unable to load config")
        print(exc)
        return 1
    try:
        queries = connect(conf.db_url)
    except (sqlite3.Error, ValueError) as exc:
        print("ERROR: Unable to connect to db")
        print(exc)
        return 1

    state = State(conf=conf, queries=queries)
    commands = build_commands()
    try:
        if not args:
            commands.run(state, Command(name="help"))
            return 1
        try:
            commands.run(state, Command(name=args[0], args=args[1:]))
        except KeyboardInterrupt:
            return 130
        except Exception as exc:
            print(exc)
            return 1
        return 0
    finally:
        queries.conn.close()


if __name__ == "__main__":
    sys.exit(main())