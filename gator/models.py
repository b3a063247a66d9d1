"""Records stored in and returned by the feed database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class User:
    """A registered user."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    name: str


@dataclass(frozen=True)
class Feed:
    """An RSS feed added by a user."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    name: str
    url: str
    user_id: UUID
    last_fetched_at: Optional[datetime] = None


@dataclass(frozen=True)
class FeedFollow:
    """A link between a user and a feed they follow."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    user_id: UUID
    feed_id: UUID


@dataclass(frozen=True)
class CreatedFeedFollow:
    """A newly created follow, with the names of its user and feed."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    user_id: UUID
    feed_id: UUID
    user_name: str
    feed_name: str


@dataclass(frozen=True)
class FeedWithOwner:
    """A feed together with the user who added it."""

    feed: Feed
    user: User


@dataclass(frozen=True)
class UserFeedFollow:
    """One feed followed by a user, by name and URL."""

    user_name: str
    feed_name: str
    feed_url: str