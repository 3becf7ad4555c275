"""@username mentions in posts and comments.

Mention notifications are best-effort: once the post or comment is stored,
nothing in here may make its creation fail.
"""

import logging
import re
from typing import Any, Iterable

from sqlmodel import Session, select

from models.notification import Notification, NotificationType
from models.user import User
from services.notifications import create_notification
from services.visibility import has_blocked

logger = logging.getLogger("huddle.mentions")

MENTION_RE = re.compile(r"@(\w+)")


def text_strings(content_blocks: Iterable[dict[str, Any]]) -> list[str]:
    return [
        block.get("text") or ""
        for block in content_blocks
        if isinstance(block, dict) and block.get("type") == "text"
    ]


def find_mentions(
    texts: Iterable[str], author_username: str, blocked_usernames: Iterable[str]
) -> set[str]:
    """
    >>> sorted(find_mentions(["hi @bob @bob", "cc @carol @me"], "me", {"carol"}))
    ['bob']
    """
    blocked = set(blocked_usernames)
    mentions = set()
    for text in texts:
        for name in MENTION_RE.findall(text):
            if name != author_username and name not in blocked:
                mentions.add(name)
    return mentions


def notify_mentions(
    session: Session,
    *,
    content_blocks: list[dict[str, Any]],
    author_id: int,
    post_id: int,
    author_username: str,
    blocked_usernames: Iterable[str],
    kind: NotificationType = NotificationType.post_mention,
    preview: dict[str, Any] | None = None,
    comment_id: int | None = None,
) -> list[Notification]:
    """Notify every mentioned user who hasn't blocked the author.

    Returns the created notifications; on any failure the error is logged,
    the session rolled back and an empty list returned.
    """
    try:
        names = find_mentions(text_strings(content_blocks), author_username, blocked_usernames)
        if not names:
            return []

        block = preview if preview is not None else (content_blocks[0] if content_blocks else None)
        extra = {"comment": {"id": comment_id}} if comment_id is not None else {}
        mentioned = session.exec(
            select(User).where(User.username.in_(sorted(names))).order_by(User.id)
        ).all()

        created = []
        for user in mentioned:
            # the caller's list covers the author's blocks, not the reverse
            if has_blocked(session, user.id, author_id):
                logger.debug(f"Skipping mention of {user}: they blocked user {author_id}")
                continue
            created.append(
                create_notification(
                    session,
                    user_id=user.id,
                    sender_id=author_id,
                    kind=kind,
                    post={"id": post_id, "block": block},
                    **extra,
                )
            )
        session.commit()
        return created
    except Exception as e:
        session.rollback()
        logger.exception(f"Cannot create mention notifications for post {post_id}: {e}")
        return []
