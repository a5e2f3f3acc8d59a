"""
Per-source response schemas.

Each public API response is validated at the adapter boundary. A malformed
payload raises pydantic.ValidationError, which the adapter turns into a fetch
failure; nothing downstream ever sees a half-parsed item.

Feeds are the exception: feedparser already normalizes RSS and Atom, and
`FeedItem` is the single shape both formats are reduced to.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class _SourceModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# =============================================================================
# HACKER NEWS (item-lookup API)
# =============================================================================


class HackerNewsItem(_SourceModel):
    """A story from /v0/item/{id}.json."""

    id: int
    title: str | None = None
    url: str | None = None
    score: int = 0
    descendants: int | None = None
    time: int
    by: str | None = None

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.time, tz=timezone.utc)


# =============================================================================
# REDDIT (subreddit listing API)
# =============================================================================


class RedditPost(_SourceModel):
    title: str
    url: str | None = None
    score: int = 0
    num_comments: int = 0
    subreddit: str = ""
    permalink: str
    created_utc: float
    author: str | None = None

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.created_utc, tz=timezone.utc)


class RedditChild(_SourceModel):
    data: RedditPost


class RedditListingData(_SourceModel):
    children: list[RedditChild] = Field(default_factory=list)


class RedditListing(_SourceModel):
    """Response of /r/{subreddit}/{hot,top}.json."""

    data: RedditListingData


# =============================================================================
# BLUESKY (full-text search API)
# =============================================================================


class BlueskyAuthor(_SourceModel):
    handle: str
    displayName: str | None = None


class BlueskyRecord(_SourceModel):
    text: str
    createdAt: datetime


class BlueskyPost(_SourceModel):
    uri: str
    cid: str = ""
    author: BlueskyAuthor
    record: BlueskyRecord
    likeCount: int | None = None
    repostCount: int | None = None
    replyCount: int | None = None

    @property
    def post_id(self) -> str:
        return self.uri.rsplit("/", 1)[-1]


class BlueskySearchResponse(_SourceModel):
    """Response of app.bsky.feed.searchPosts."""

    posts: list[BlueskyPost] = Field(default_factory=list)


# =============================================================================
# RSS / ATOM
# =============================================================================


@dataclass(frozen=True)
class FeedItem:
    """One entry of an RSS or Atom feed, normalized."""

    title: str
    link: str | None
    published_at: datetime | None
