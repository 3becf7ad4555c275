"""Who may see and comment on what.

Every answer is computed from the rows currently in the session: nothing here
is cached between requests, so a fresh unfriend or block is honored at once.
"""

import logging

from sqlalchemy import and_, or_
from sqlmodel import Session, select

from models.friendship import Block, Friendship
from models.post import Post
from models.user import User
from services.context import Viewer
from services.errors import ErrorCode, Forbidden, NotFound

logger = logging.getLogger("huddle.visibility")


def get_friendship(session: Session, owner_id: int, friend_id: int) -> Friendship | None:
    return session.exec(
        select(Friendship).where(
            Friendship.owner_id == owner_id,
            Friendship.friend_id == friend_id,
        )
    ).first()


def are_mutual_friends(session: Session, user_id: int, other_id: int) -> bool:
    rows = session.exec(
        select(Friendship).where(
            or_(
                and_(Friendship.owner_id == user_id, Friendship.friend_id == other_id),
                and_(Friendship.owner_id == other_id, Friendship.friend_id == user_id),
            )
        )
    ).all()
    return len(rows) == 2


def has_blocked(session: Session, blocker_id: int, blocked_id: int) -> bool:
    return (
        session.exec(
            select(Block.id).where(
                Block.blocker_id == blocker_id,
                Block.blocked_user_id == blocked_id,
            )
        ).first()
        is not None
    )


def is_blocked_either_way(session: Session, user_id: int, other_id: int) -> bool:
    return has_blocked(session, user_id, other_id) or has_blocked(
        session, other_id, user_id
    )


def blocked_user_ids(session: Session, blocker_id: int) -> set[int]:
    """Ids of the users `blocker_id` has blocked (one direction only)"""
    return set(
        session.exec(
            select(Block.blocked_user_id).where(Block.blocker_id == blocker_id)
        ).all()
    )


def blocked_usernames(session: Session, blocker_id: int) -> set[str]:
    return set(
        session.exec(
            select(User.username)
            .join(Block, Block.blocked_user_id == User.id)
            .where(Block.blocker_id == blocker_id)
        ).all()
    )


def can_view_post(session: Session, viewer: Viewer, post: Post) -> bool:
    if post.author_id == viewer.id:
        return True

    if session.get(User, post.author_id) is None:
        return False

    # only mutual friends see posts, a one-sided row is not enough
    own_side = get_friendship(session, viewer.id, post.author_id)
    other_side = get_friendship(session, post.author_id, viewer.id)
    if own_side is None or other_side is None:
        return False

    # favorites-only posts are gated by the viewer's own favorite flag
    if post.favorites_only and not own_side.is_favorite:
        return False
    return True


def can_comment_on_post(session: Session, viewer: Viewer, post: Post) -> bool:
    # blocked pairs can't be friends, so no block lookup is needed here
    if post.author_id == viewer.id:
        return True
    if not can_view_post(session, viewer, post):
        return False
    return not post.comments_disabled


def require_post(session: Session, post_id: int) -> Post:
    post = session.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


def require_visible_post(session: Session, viewer: Viewer, post_id: int) -> Post:
    post = require_post(session, post_id)
    if not can_view_post(session, viewer, post):
        logger.debug(f"{viewer.username} denied view of post {post_id}")
        raise Forbidden("You cannot view this post", ErrorCode.post_not_visible)
    return post


def require_feed_access(session: Session, viewer: Viewer, owner_id: int) -> User:
    """Return the feed owner when the viewer may read their feed"""
    owner = session.get(User, owner_id)
    if owner is None:
        raise NotFound("User not found")
    if owner_id != viewer.id and not are_mutual_friends(session, viewer.id, owner_id):
        raise Forbidden("Cannot view feed", ErrorCode.feed_not_visible)
    return owner
