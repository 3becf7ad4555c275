"""Ordering of the friends list shown on the feed page"""

import datetime
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any


@dataclass(slots=True)
class LatestPost:
    id: int
    created_time: datetime.datetime
    block: dict[str, Any] | None = None


@dataclass(slots=True)
class FeedFriendship:
    """A friendship as seen from its owner, with the friend's newest post"""

    friend_id: int
    is_favorite: bool
    last_read_post_time: datetime.datetime
    last_read_post_id: int | None = None
    latest_post: LatestPost | None = None
    friend: dict[str, Any] = field(default_factory=dict)

    @property
    def is_unread(self) -> bool:
        if self.latest_post is None:
            return False
        return self.last_read_post_time < self.latest_post.created_time

    def to_dict(self) -> dict:
        latest = self.latest_post
        return {
            "friend": self.friend,
            "is_favorite": self.is_favorite,
            "is_unread": self.is_unread,
            "last_read_post_id": self.last_read_post_id,
            "last_read_post_time": self.last_read_post_time.isoformat(),
            "latest_post": {
                "id": latest.id,
                "created_time": latest.created_time.isoformat(),
                "block": latest.block,
            }
            if latest
            else None,
        }


def _favorite_first(a: FeedFriendship, b: FeedFriendship) -> int:
    if a.is_favorite == b.is_favorite:
        return 0
    return -1 if a.is_favorite else 1


def compare_feed_friendships(a: FeedFriendship, b: FeedFriendship) -> int:
    """Negative when `a` goes first.

    The layers: friends with posts before friends without, unread before
    read, then recency, where a differing favorite flag overrides the
    direction of the time comparison.
    """
    post_a, post_b = a.latest_post, b.latest_post
    if post_a is None and post_b is None:
        return _favorite_first(a, b)
    if post_a is None:
        return 1
    if post_b is None:
        return -1

    if a.is_unread != b.is_unread:
        return -1 if a.is_unread else 1

    if post_a.created_time != post_b.created_time:
        favorite = _favorite_first(a, b)
        if favorite:
            return favorite
        return -1 if post_a.created_time > post_b.created_time else 1

    return _favorite_first(a, b)


def rank_feed_friendships(items: list[FeedFriendship]) -> list[FeedFriendship]:
    # sorted() is stable: equivalent entries keep their incoming order
    return sorted(items, key=cmp_to_key(compare_feed_friendships))
