"""Posts, comments and likes"""

import logging
from typing import Any

from sqlmodel import Session, delete, select

import settings
from models.notification import NotificationType
from models.post import CONTENT_BLOCK_TYPES, Comment, Post
from models.types import utcnow
from models.user import User
from services.context import Viewer
from services.errors import Conflict, ErrorCode, Forbidden, InvalidInput, NotFound
from services.feed import comment_response, decorate_posts
from services.mentions import notify_mentions
from services.notifications import create_notification, post_reference
from services.visibility import (
    blocked_user_ids,
    blocked_usernames,
    can_comment_on_post,
    require_post,
    require_visible_post,
)

logger = logging.getLogger("huddle.posts")


def validate_content(content: Any) -> list[dict[str, Any]]:
    if not isinstance(content, list) or not content:
        raise InvalidInput("Invalid post")
    if len(content) > settings.MAX_POST_BLOCKS:
        raise InvalidInput("Post is too long")
    for block in content:
        if not isinstance(block, dict) or block.get("type") not in CONTENT_BLOCK_TYPES:
            raise InvalidInput("Invalid post block")
        if block["type"] == "text" and not isinstance(block.get("text"), str):
            raise InvalidInput("Text blocks need a text")
        if block["type"] == "image" and not isinstance(block.get("src"), str):
            raise InvalidInput("Image blocks need a src")
    return content


def _require_author(post: Post, viewer: Viewer, action: str) -> None:
    if post.author_id != viewer.id:
        raise Forbidden(f"You cannot {action} this post", ErrorCode.not_author)


def _decorated(session: Session, viewer: Viewer, post: Post) -> dict:
    return decorate_posts(session, viewer, [post])[0]


def get_post(session: Session, viewer: Viewer, post_id: int) -> dict:
    return _decorated(session, viewer, require_visible_post(session, viewer, post_id))


def create_post(session: Session, viewer: Viewer, content: Any) -> dict:
    content = validate_content(content)
    now = utcnow()
    post = Post(author_id=viewer.id, content=content, created_time=now, updated_time=now)
    session.add(post)
    session.commit()
    session.refresh(post)

    notify_mentions(
        session,
        content_blocks=content,
        author_id=viewer.id,
        post_id=post.id,
        author_username=viewer.username,
        blocked_usernames=blocked_usernames(session, viewer.id),
        kind=NotificationType.post_mention,
    )
    return _decorated(session, viewer, post)


def update_post(session: Session, viewer: Viewer, post_id: int, content: Any) -> dict:
    post = require_post(session, post_id)
    _require_author(post, viewer, "update")
    post.content = validate_content(content)
    post.updated_time = utcnow()
    session.add(post)
    session.commit()
    session.refresh(post)
    return _decorated(session, viewer, post)


def delete_post(session: Session, viewer: Viewer, post_id: int) -> None:
    post = require_post(session, post_id)
    _require_author(post, viewer, "delete")
    session.exec(delete(Comment).where(Comment.post_id == post.id))
    session.delete(post)
    session.commit()


def _set_flag(session: Session, viewer: Viewer, post_id: int, flag: str, enabled: bool) -> dict:
    post = require_post(session, post_id)
    _require_author(post, viewer, "change")
    setattr(post, flag, enabled)
    session.add(post)
    session.commit()
    session.refresh(post)
    return _decorated(session, viewer, post)


def set_comments_disabled(session: Session, viewer: Viewer, post_id: int, enabled: bool) -> dict:
    return _set_flag(session, viewer, post_id, "comments_disabled", enabled)


def set_favorites_only(session: Session, viewer: Viewer, post_id: int, enabled: bool) -> dict:
    return _set_flag(session, viewer, post_id, "favorites_only", enabled)


def like_post(session: Session, viewer: Viewer, post_id: int) -> int:
    """Like a post, returning the new like count"""
    post = require_visible_post(session, viewer, post_id)
    if viewer.id in post.liked_by_ids:
        raise Conflict("You already liked this post", ErrorCode.already_liked)

    # reassign so the JSON column is flagged as changed
    post.liked_by_ids = [*post.liked_by_ids, viewer.id]
    session.add(post)
    if post.author_id != viewer.id:
        create_notification(
            session,
            user_id=post.author_id,
            sender_id=viewer.id,
            kind=NotificationType.post_like,
            post=post_reference(post),
        )
    session.commit()
    return len(post.liked_by_ids)


def unlike_post(session: Session, viewer: Viewer, post_id: int) -> int:
    post = require_visible_post(session, viewer, post_id)
    if viewer.id not in post.liked_by_ids:
        raise Conflict("You have not liked this post", ErrorCode.not_liked)
    post.liked_by_ids = [uid for uid in post.liked_by_ids if uid != viewer.id]
    session.add(post)
    session.commit()
    return len(post.liked_by_ids)


def list_comments(session: Session, viewer: Viewer, post_id: int) -> list[dict]:
    post = require_visible_post(session, viewer, post_id)
    query = (
        select(Comment, User)
        .join(User, User.id == Comment.author_id)
        .where(Comment.post_id == post.id)
        .order_by(Comment.created_time.desc(), Comment.id.desc())
    )
    hidden = blocked_user_ids(session, viewer.id)
    if hidden:
        query = query.where(Comment.author_id.not_in(list(hidden)))
    return [comment_response(comment, author) for comment, author in session.exec(query)]


def create_comment(session: Session, viewer: Viewer, post_id: int, content: Any) -> dict:
    post = require_post(session, post_id)
    if not can_comment_on_post(session, viewer, post):
        raise Forbidden("You cannot comment on this post", ErrorCode.comments_not_allowed)

    if not isinstance(content, str) or not content.strip():
        raise InvalidInput("Invalid comment")
    if len(content) > settings.MAX_COMMENT_LENGTH:
        raise InvalidInput("Comment is too long")

    comment = Comment(post_id=post.id, author_id=viewer.id, content=content, created_time=utcnow())
    session.add(comment)
    if post.author_id != viewer.id:
        create_notification(
            session,
            user_id=post.author_id,
            sender_id=viewer.id,
            kind=NotificationType.comment,
            post=post_reference(post),
            message=content,
        )
    session.commit()
    session.refresh(comment)

    notify_mentions(
        session,
        content_blocks=[{"type": "text", "text": content}],
        author_id=viewer.id,
        post_id=post.id,
        author_username=viewer.username,
        blocked_usernames=blocked_usernames(session, viewer.id),
        kind=NotificationType.comment_mention,
        comment_id=comment.id,
    )
    author = session.get(User, viewer.id)
    return comment_response(comment, author)


def delete_comment(session: Session, viewer: Viewer, post_id: int, comment_id: int) -> None:
    post = require_post(session, post_id)
    comment = session.get(Comment, comment_id)
    if comment is None or comment.post_id != post.id:
        raise NotFound("Comment not found")
    if viewer.id not in (comment.author_id, post.author_id):
        raise Forbidden("You cannot delete this comment", ErrorCode.not_author)
    session.delete(comment)
    session.commit()
