"""Models package for the Huddle backend"""

from .common import get_session, init_db
from .types import UtcAwareDateTime
from .user import User
from .friendship import Block, FriendRequest, Friendship
from .post import Comment, Post
from .notification import Notification, NotificationType

__all__ = [
    "Block",
    "Comment",
    "FriendRequest",
    "Friendship",
    "Notification",
    "NotificationType",
    "Post",
    "User",
    "UtcAwareDateTime",
    "get_session",
    "init_db",
]
