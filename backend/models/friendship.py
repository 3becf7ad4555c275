import datetime

from sqlalchemy import UniqueConstraint, CheckConstraint, Column
from sqlmodel import SQLModel, Field

from models.types import UtcAwareDateTime, utcnow


class Friendship(SQLModel, table=True):
    """One direction of a friendship: the row is owned by `owner_id`.

    Rows always come in pairs, (A, B) and (B, A). Per-owner preferences
    (favorite, read marker) live on the owner's side.
    """

    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("owner_id", "friend_id", name="uq_friendship_pair"),
        CheckConstraint("owner_id <> friend_id", name="ck_friendship_not_self"),
    )

    id: int | None = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="users.id", index=True)
    friend_id: int = Field(foreign_key="users.id", index=True)

    is_favorite: bool = False
    last_read_post_id: int | None = None
    last_read_post_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    created_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )


class FriendRequest(SQLModel, table=True):
    __tablename__ = "friend_requests"
    __table_args__ = (
        UniqueConstraint("from_user_id", "to_user_id", name="uq_friend_request_pair"),
        CheckConstraint("from_user_id <> to_user_id", name="ck_friend_request_not_self"),
    )

    id: int | None = Field(default=None, primary_key=True)
    from_user_id: int = Field(foreign_key="users.id", index=True)
    to_user_id: int = Field(foreign_key="users.id", index=True)
    created_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )


class Block(SQLModel, table=True):
    __tablename__ = "blocks"
    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_user_id", name="uq_block_pair"),
        CheckConstraint("blocker_id <> blocked_user_id", name="ck_block_not_self"),
    )

    id: int | None = Field(default=None, primary_key=True)
    blocker_id: int = Field(foreign_key="users.id", index=True)
    blocked_user_id: int = Field(foreign_key="users.id", index=True)
    created_time: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
