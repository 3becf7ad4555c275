"""Per-friend feeds: cursor pagination, post decoration and read markers"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import and_, or_
from sqlmodel import Session, select

import settings
from models.friendship import Friendship
from models.post import Comment, Post
from models.types import utcnow
from models.user import User
from services.context import Viewer
from services.errors import ErrorCode, Forbidden, NotFound
from services.ranking import FeedFriendship, LatestPost, rank_feed_friendships
from services.visibility import blocked_user_ids, get_friendship, require_feed_access
from utils.logs import time_it

logger = logging.getLogger("huddle.feed")


@dataclass
class FeedPage:
    items: list[dict] = field(default_factory=list)
    next_cursor: int | None = None

    def to_dict(self) -> dict:
        return {"items": self.items, "cursor": self.next_cursor}


def _newest_first(query):
    return query.order_by(Post.created_time.desc(), Post.id.desc())


def _hide_favorites_only(session: Session, viewer: Viewer, owner_id: int) -> bool:
    if owner_id == viewer.id:
        return False
    own_side = get_friendship(session, viewer.id, owner_id)
    return own_side is None or not own_side.is_favorite


def comments_for_posts(
    session: Session, post_ids: list[int], hidden_author_ids: set[int]
) -> dict[int, list[dict]]:
    """Comments of each post, oldest first, without the hidden authors"""
    by_post: dict[int, list[dict]] = {post_id: [] for post_id in post_ids}
    if not post_ids:
        return by_post
    query = (
        select(Comment, User)
        .join(User, User.id == Comment.author_id)
        .where(Comment.post_id.in_(post_ids))
        .order_by(Comment.created_time, Comment.id)
    )
    if hidden_author_ids:
        query = query.where(Comment.author_id.not_in(list(hidden_author_ids)))
    for comment, author in session.exec(query):
        by_post[comment.post_id].append(comment_response(comment, author))
    return by_post


def comment_response(comment: Comment, author: User) -> dict:
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "content": comment.content,
        "created_time": comment.created_time.isoformat(),
        "author": author.summary(),
    }


def post_response(
    post: Post,
    *,
    viewer: Viewer,
    author: User,
    comments: list[dict],
) -> dict:
    return {
        "id": post.id,
        "author_id": post.author_id,
        "author": author.summary(),
        "content": post.content,
        "created_time": post.created_time.isoformat(),
        "updated_time": post.updated_time.isoformat(),
        "comments_disabled": post.comments_disabled,
        "favorites_only": post.favorites_only,
        "likes": len(post.liked_by_ids),
        "is_liked_by_user": viewer.id in post.liked_by_ids,
        "comments": comments,
    }


def decorate_posts(session: Session, viewer: Viewer, posts: list[Post]) -> list[dict]:
    hidden = blocked_user_ids(session, viewer.id)
    comments = comments_for_posts(session, [post.id for post in posts], hidden)
    author_ids = list({post.author_id for post in posts})
    authors = {
        user.id: user
        for user in session.exec(select(User).where(User.id.in_(author_ids)))
    }
    return [
        post_response(
            post,
            viewer=viewer,
            author=authors[post.author_id],
            comments=comments[post.id],
        )
        for post in posts
    ]


def get_feed(
    session: Session,
    viewer: Viewer,
    owner_id: int,
    cursor: int | None = None,
    page_size: int | None = None,
) -> FeedPage:
    page_size = page_size or settings.FEED_PAGE_SIZE
    require_feed_access(session, viewer, owner_id)

    query = select(Post).where(Post.author_id == owner_id)
    if _hide_favorites_only(session, viewer, owner_id):
        query = query.where(Post.favorites_only == False)  # noqa: E712

    if cursor is not None:
        last_seen = session.get(Post, cursor)
        if last_seen is None or last_seen.author_id != owner_id:
            raise NotFound("Cursor not found")
        # strictly after the cursor in (created_time desc, id desc) order
        query = query.where(
            or_(
                Post.created_time < last_seen.created_time,
                and_(
                    Post.created_time == last_seen.created_time,
                    Post.id < last_seen.id,
                ),
            )
        )

    posts = list(session.exec(_newest_first(query).limit(page_size + 1)).all())
    next_cursor = None
    if len(posts) > page_size:
        posts = posts[:page_size]
        next_cursor = posts[-1].id

    return FeedPage(items=decorate_posts(session, viewer, posts), next_cursor=next_cursor)


def mark_read(session: Session, viewer: Viewer, owner_id: int) -> Friendship:
    require_feed_access(session, viewer, owner_id)
    friendship = get_friendship(session, viewer.id, owner_id)
    if friendship is None:
        raise Forbidden("Cannot mark your own feed as read", ErrorCode.self_action)

    query = select(Post).where(Post.author_id == owner_id)
    if not friendship.is_favorite:
        query = query.where(Post.favorites_only == False)  # noqa: E712
    latest = session.exec(_newest_first(query).limit(1)).first()

    now = utcnow()
    # the marker never moves back in time
    if now > friendship.last_read_post_time:
        friendship.last_read_post_time = now
    friendship.last_read_post_id = latest.id if latest else None
    session.add(friendship)
    session.commit()
    session.refresh(friendship)
    return friendship


@time_it
def friends_feed(session: Session, viewer: Viewer) -> list[FeedFriendship]:
    """The viewer's friends with their newest post, ranked for display"""
    rows = session.exec(
        select(Friendship, User)
        .join(User, User.id == Friendship.friend_id)
        .where(Friendship.owner_id == viewer.id)
        .order_by(Friendship.id)
    ).all()

    entries = []
    for friendship, friend in rows:
        query = select(Post).where(Post.author_id == friend.id)
        if not friendship.is_favorite:
            query = query.where(Post.favorites_only == False)  # noqa: E712
        latest = session.exec(_newest_first(query).limit(1)).first()
        entries.append(
            FeedFriendship(
                friend_id=friend.id,
                is_favorite=friendship.is_favorite,
                last_read_post_time=friendship.last_read_post_time,
                last_read_post_id=friendship.last_read_post_id,
                latest_post=LatestPost(
                    id=latest.id,
                    created_time=latest.created_time,
                    block=latest.first_block,
                )
                if latest
                else None,
                friend=friend.summary(),
            )
        )
    return rank_feed_friendships(entries)
