"""User accounts"""

import datetime

from sqlalchemy import Text
from sqlmodel import SQLModel, Field, Column

from .types import UtcAwareDateTime, utcnow


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    name: str = ""
    bio: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    avatar_src: str | None = None
    created_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )

    def summary(self) -> dict:
        """The trimmed representation embedded in posts, comments and lists"""
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "avatar_src": self.avatar_src,
        }

    def __str__(self):
        return f"@{self.username}"
