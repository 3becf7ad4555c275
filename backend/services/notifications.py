import logging

from sqlalchemy import func
from sqlmodel import Session, select, update

import settings
from models.notification import Notification, NotificationType
from models.post import Post
from models.types import utcnow
from models.user import User

logger = logging.getLogger("huddle.notifications")


def post_reference(post: Post) -> dict:
    return {"id": post.id, "block": post.first_block}


def create_notification(
    session: Session,
    *,
    user_id: int,
    sender_id: int,
    kind: NotificationType,
    post: dict | None = None,
    **extra,
) -> Notification:
    """Stage a notification on the session, the caller commits"""
    body = {"type": kind.value}
    if post is not None:
        body["post"] = post
    body.update(extra)
    notification = Notification(
        user_id=user_id, sender_id=sender_id, created_time=utcnow(), body=body
    )
    session.add(notification)
    return notification


def list_notifications(
    session: Session,
    user_id: int,
    cursor: int | None = None,
    limit: int | None = None,
) -> dict:
    limit = limit or settings.NOTIFICATIONS_PAGE_SIZE
    query = (
        select(Notification, User)
        .join(User, User.id == Notification.sender_id)
        .where(Notification.user_id == user_id)
        .order_by(Notification.id.desc())
    )
    if cursor is not None:
        query = query.where(Notification.id < cursor)
    rows = session.exec(query.limit(limit + 1)).all()

    next_cursor = None
    if len(rows) > limit:
        rows = rows[:limit]
        next_cursor = rows[-1][0].id

    unread_count = session.exec(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.is_unread == True)  # noqa: E712
    ).one()

    return {
        "notifications": [
            {
                "id": notification.id,
                "created_time": notification.created_time.isoformat(),
                "is_unread": notification.is_unread,
                "body": notification.body,
                "sender": sender.summary() | {"bio": sender.bio},
            }
            for notification, sender in rows
        ],
        "unread_count": unread_count,
        "cursor": next_cursor,
    }


def mark_all_read(session: Session, user_id: int) -> None:
    session.exec(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_unread == True)  # noqa: E712
        .values(is_unread=False)
    )
    session.commit()
