import datetime
from typing import Any

from sqlalchemy import Column, Index, JSON, Text
from sqlmodel import SQLModel, Field

from models.types import UtcAwareDateTime, utcnow

CONTENT_BLOCK_TYPES = {"text", "image"}


class Post(SQLModel, table=True):
    __tablename__ = "posts"
    __table_args__ = (
        # the feed reads by author, newest first, with id as tie-breaker
        Index("ix_posts_author_created_id", "author_id", "created_time", "id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    author_id: int = Field(foreign_key="users.id", index=True)
    content: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    created_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    updated_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    comments_disabled: bool = False
    favorites_only: bool = False
    liked_by_ids: list[int] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )

    @property
    def first_block(self) -> dict | None:
        return self.content[0] if self.content else None


class Comment(SQLModel, table=True):
    __tablename__ = "comments"

    id: int | None = Field(default=None, primary_key=True)
    post_id: int = Field(foreign_key="posts.id", index=True)
    author_id: int = Field(foreign_key="users.id", index=True)
    content: str = Field(sa_column=Column(Text, nullable=False))
    created_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
