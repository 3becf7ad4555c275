import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Column, Index, JSON
from sqlmodel import SQLModel, Field

from models.types import UtcAwareDateTime, utcnow


class NotificationType(str, Enum):
    post_like = "post-like"
    post_mention = "post-mention"
    comment = "comment"
    comment_mention = "comment-mention"
    announcement = "announcement"


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "is_unread"),
        Index("ix_notifications_user_sender", "user_id", "sender_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)  # the recipient
    sender_id: int = Field(foreign_key="users.id")
    created_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    is_unread: bool = True
    # {"type": NotificationType, "post": {"id": ..., "block": ...}, "message": ...}
    body: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )

    @property
    def kind(self) -> NotificationType | None:
        try:
            return NotificationType(self.body.get("type"))
        except ValueError:
            return None
