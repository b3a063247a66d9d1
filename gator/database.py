"""Queries over the users, feeds and feed_follows tables."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional
from uuid import UUID

from gator.models import (
    CreatedFeedFollow,
    Feed,
    FeedFollow,
    FeedWithOwner,
    User,
    UserFeedFollow,
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS feeds (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    last_fetched_at TEXT
);
CREATE TABLE IF NOT EXISTS feed_follows (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    feed_id TEXT NOT NULL REFERENCES feeds (id) ON DELETE CASCADE,
    UNIQUE (user_id, feed_id)
);
"""

_FEED_COLUMNS = "id, created_at, updated_at, name, url, user_id, last_fetched_at"
_USER_COLUMNS = "id, created_at, updated_at, name"
_FOLLOW_COLUMNS = "id, created_at, updated_at, user_id, feed_id"


class NotFoundError(LookupError):
    """Raised when a query that returns one row finds none."""


def _ts(value: Optional[datetime]) -> Optional[str]:
    return None if value is None else value.isoformat()


def _dt(value: Optional[str]) -> Optional[datetime]:
    return None if value is None else datetime.fromisoformat(value)


def _user(row) -> User:
    return User(UUID(row[0]), _dt(row[1]), _dt(row[2]), row[3])


def _feed(row) -> Feed:
    return Feed(
        UUID(row[0]), _dt(row[1]), _dt(row[2]), row[3], row[4], UUID(row[5]), _dt(row[6])
    )


def _follow(row) -> FeedFollow:
    return FeedFollow(UUID(row[0]), _dt(row[1]), _dt(row[2]), UUID(row[3]), UUID(row[4]))


def connect(db_url: str) -> "Queries":
    """Open the database named by db_url and make sure its tables exist.

    Accepts a file path, ":memory:", or a "sqlite:///path" URL.
    """
    if db_url.startswith("sqlite:///"):
        path = db_url[len("sqlite:///"):] or ":memory:"
    elif db_url == "sqlite://":
        path = ":memory:"
    elif "://" in db_url:
        raise ValueError(f"unsupported database url: {db_url}")
    else:
        path = db_url
    conn = sqlite3.connect(path, isolation_level=None)
    queries = Queries(conn)
    queries.create_schema()
    return queries


class Queries:
    """Typed access to the feed database over a sqlite3 connection.

    The connection is switched to autocommit; use transaction() to group writes.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        if conn.in_transaction:
            conn.commit()
        conn.isolation_level = None
        conn.execute("PRAGMA foreign_keys = ON")

    def create_schema(self) -> None:
        """Create the tables if they are missing."""
        self.conn.executescript(_SCHEMA)

    @contextmanager
    def transaction(self) -> Iterator["Queries"]:
        """Run the enclosed queries in one transaction, rolled back on error."""
        if self.conn.in_transaction:
            yield self
            return
        self.conn.execute("BEGIN")
        try:
            yield self
        except BaseException:
            self.conn.rollback()
            raise
        self.conn.commit()

    def _one(self, sql: str, params=()):
        row = self.conn.execute(sql, params).fetchone()
        if row is None:
            raise NotFoundError("no rows in result set")
        return row

    # users

    def create_user(self, id, created_at, updated_at, name) -> User:
        self.conn.execute(
            "INSERT INTO users (id, created_at, updated_at, name) VALUES (?, ?, ?, ?)",
            (str(id), _ts(created_at), _ts(updated_at), name),
        )
        return _user(self._one(f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (str(id),)))

    def drop_users(self) -> None:
        """Remove every user and everything that refers to one."""
        with self.transaction():
            self.conn.execute("DELETE FROM feed_follows")
            self.conn.execute("DELETE FROM feeds")
            self.conn.execute("DELETE FROM users")

    def get_user(self, name) -> User:
        return _user(self._one(f"SELECT {_USER_COLUMNS} FROM users WHERE name = ?", (name,)))

    def get_users(self) -> list[User]:
        rows = self.conn.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY rowid")
        return [_user(row) for row in rows]

    # feeds

    def create_feed(self, id, created_at, updated_at, name, url, user_id) -> Feed:
        self.conn.execute(
            "INSERT INTO feeds (id, created_at, updated_at, name, url, user_id) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (str(id), _ts(created_at), _ts(updated_at), name, url, str(user_id)),
        )
        return _feed(self._one(f"SELECT {_FEED_COLUMNS} FROM feeds WHERE id = ?", (str(id),)))

    def get_feed(self, url) -> Feed:
        return _feed(self._one(f"SELECT {_FEED_COLUMNS} FROM feeds WHERE url = ?", (url,)))

    def get_feeds(self) -> list[FeedWithOwner]:
        rows = self.conn.execute(
            "SELECT feeds.id, feeds.created_at, feeds.updated_at, feeds.name, feeds.url, "
            "feeds.user_id, feeds.last_fetched_at, users.id, users.created_at, "
            "users.updated_at, users.name "
            "FROM feeds INNER JOIN users ON feeds.user_id = users.id ORDER BY feeds.rowid"
        )
        return [FeedWithOwner(feed=_feed(row[:7]), user=_user(row[7:])) for row in rows]

    def get_next_feed_to_fetch(self, user_id) -> Feed:
        """Return the followed feed fetched longest ago, never-fetched feeds first."""
        return _feed(
            self._one(
                f"SELECT {_FEED_COLUMNS} FROM feeds WHERE id IN ("
                "SELECT feed_id FROM feed_follows WHERE user_id = ?) "
                "ORDER BY last_fetched_at IS NOT NULL, last_fetched_at ASC LIMIT 1",
                (str(user_id),),
            )
        )

    def mark_feed_fetched(self, last_fetched_at, id) -> Feed:
        with self.transaction():
            stamp = _ts(last_fetched_at)
            cursor = self.conn.execute(
                "UPDATE feeds SET last_fetched_at = ?, updated_at = ? WHERE id = ?",
                (stamp, stamp, str(id)),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("no rows in result set")
            return _feed(
                self._one(f"SELECT {_FEED_COLUMNS} FROM feeds WHERE id = ?", (str(id),))
            )

    # feed follows

    def create_feed_follow(self, id, created_at, updated_at, user_id, feed_id) -> CreatedFeedFollow:
        with self.transaction():
            self.conn.execute(
                "INSERT INTO feed_follows (id, created_at, updated_at, user_id, feed_id) "
                "VALUES (?, ?, ?, ?, ?)",
                (str(id), _ts(created_at), _ts(updated_at), str(user_id), str(feed_id)),
            )
            row = self._one(
                "SELECT ff.id, ff.created_at, ff.updated_at, ff.user_id, ff.feed_id, "
                "users.name, feeds.name FROM feed_follows AS ff "
                "INNER JOIN users ON ff.user_id = users.id "
                "INNER JOIN feeds ON ff.feed_id = feeds.id WHERE ff.id = ?",
                (str(id),),
            )
        follow = _follow(row[:5])
        return CreatedFeedFollow(
            follow.id,
            follow.created_at,
            follow.updated_at,
            follow.user_id,
            follow.feed_id,
            row[5],
            row[6],
        )

    def delete_users_feed_follows_by_url(self, name, url) -> list[FeedFollow]:
        """Delete the named user's follows of the feed at url and return them."""
        where = (
            "WHERE user_id = (SELECT id FROM users WHERE users.name = ?) "
            "AND feed_id = (SELECT id FROM feeds WHERE url = ?)"
        )
        with self.transaction():
            rows = self.conn.execute(
                f"SELECT {_FOLLOW_COLUMNS} FROM feed_follows {where} ORDER BY rowid",
                (name, url),
            ).fetchall()
            self.conn.execute(f"DELETE FROM feed_follows {where}", (name, url))
        return [_follow(row) for row in rows]

    def get_users_feed_follows(self, name) -> list[UserFeedFollow]:
        rows = self.conn.execute(
            "SELECT users.name, feeds.name, feeds.url FROM feed_follows "
            "INNER JOIN users ON feed_follows.user_id = users.id "
            "INNER JOIN feeds ON feed_follows.feed_id = feeds.id "
            "WHERE users.name = ? ORDER BY feed_follows.rowid",
            (name,),
        )
        return [UserFeedFollow(*row) for row in rows]