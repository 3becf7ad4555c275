"""Friend requests, friendships and blocks.

Per ordered pair the graph moves NONE -> REQUESTED -> FRIENDS <-> NONE, and a
block in either direction wins over everything else. Every operation that
touches more than one row stages all of its changes on the session and
commits once, so a failure leaves no half-applied state behind.
"""

import logging

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, delete, select

import settings
from models.common import is_unique_violation
from models.friendship import Block, FriendRequest, Friendship
from models.notification import Notification
from models.post import Comment, Post
from models.types import utcnow
from models.user import User
from services import errors
from services.context import Viewer
from services.errors import ErrorCode, Forbidden, NotFound
from services.visibility import get_friendship, has_blocked, is_blocked_either_way

logger = logging.getLogger("huddle.friendship")


def _pair_filter(model, left_column, right_column, a: int, b: int):
    return or_(
        and_(getattr(model, left_column) == a, getattr(model, right_column) == b),
        and_(getattr(model, left_column) == b, getattr(model, right_column) == a),
    )


def _friendships_between(a: int, b: int):
    return _pair_filter(Friendship, "owner_id", "friend_id", a, b)


def _requests_between(a: int, b: int):
    return _pair_filter(FriendRequest, "from_user_id", "to_user_id", a, b)


def friend_count(session: Session, user_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(Friendship).where(Friendship.owner_id == user_id)
    ).one()


def _check_friend_limit(session: Session, user_id: int, max_friends: int) -> None:
    if friend_count(session, user_id) >= max_friends:
        raise errors.friend_limit_exceeded(max_friends)


def _commit(session: Session, conflict: errors.SocialError) -> None:
    """Commit, turning a unique-constraint race into the given domain error"""
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if is_unique_violation(e):
            raise conflict from e
        raise


def send_request(
    session: Session,
    *,
    sender: Viewer,
    recipient_id: int,
    max_friends: int | None = None,
) -> FriendRequest:
    max_friends = settings.MAX_FRIENDS if max_friends is None else max_friends
    if sender.id == recipient_id:
        raise errors.self_request()

    if session.get(User, recipient_id) is None:
        raise NotFound("User not found")

    if is_blocked_either_way(session, sender.id, recipient_id):
        raise errors.already_blocked()

    if get_friendship(session, sender.id, recipient_id) or get_friendship(
        session, recipient_id, sender.id
    ):
        raise errors.already_friends()

    pending = session.exec(
        select(FriendRequest).where(
            FriendRequest.from_user_id == sender.id,
            FriendRequest.to_user_id == recipient_id,
        )
    ).first()
    if pending:
        raise errors.already_requested()

    _check_friend_limit(session, sender.id, max_friends)

    friend_request = FriendRequest(
        from_user_id=sender.id, to_user_id=recipient_id, created_time=utcnow()
    )
    session.add(friend_request)
    _commit(session, errors.already_requested())
    session.refresh(friend_request)
    logger.debug(f"{sender.username} requested friendship with user {recipient_id}")
    return friend_request


def _get_request(session: Session, request_id: int) -> FriendRequest:
    friend_request = session.get(FriendRequest, request_id)
    if friend_request is None:
        raise NotFound("Friend request not found")
    return friend_request


def accept_request(
    session: Session,
    *,
    request_id: int,
    accepting: Viewer,
    max_friends: int | None = None,
) -> tuple[Friendship, Friendship]:
    """Turn a pending request into the two friendship rows.

    Returns (accepting user's row, sender's row).
    """
    max_friends = settings.MAX_FRIENDS if max_friends is None else max_friends
    friend_request = _get_request(session, request_id)
    # only the recipient may accept, anyone else gets the same not-found
    if friend_request.to_user_id != accepting.id:
        raise NotFound("Friend request not found")

    sender_id = friend_request.from_user_id
    _check_friend_limit(session, accepting.id, max_friends)
    _check_friend_limit(session, sender_id, max_friends)

    # a crossed request in the other direction is consumed as well
    session.exec(delete(FriendRequest).where(_requests_between(accepting.id, sender_id)))
    now = utcnow()
    own_row = Friendship(owner_id=accepting.id, friend_id=sender_id, last_read_post_time=now)
    other_row = Friendship(owner_id=sender_id, friend_id=accepting.id, last_read_post_time=now)
    session.add(own_row)
    session.add(other_row)
    _commit(session, errors.already_friends())

    session.refresh(own_row)
    session.refresh(other_row)
    logger.info(f"{accepting.username} accepted friendship with user {sender_id}")
    return own_row, other_row


def reject_request(session: Session, *, request_id: int, rejecting: Viewer) -> None:
    friend_request = _get_request(session, request_id)
    if friend_request.to_user_id != rejecting.id:
        raise NotFound("Friend request not found")
    session.delete(friend_request)
    session.commit()


def cancel_request(session: Session, *, request_id: int, cancelling: Viewer) -> None:
    friend_request = _get_request(session, request_id)
    if friend_request.from_user_id != cancelling.id:
        raise NotFound("Friend request not found")
    session.delete(friend_request)
    session.commit()


def unfriend(session: Session, *, user_id: int, other_id: int) -> None:
    rows = session.exec(
        select(Friendship).where(_friendships_between(user_id, other_id))
    ).all()
    if not rows:
        raise NotFound("No existing friendship to end")
    for row in rows:
        session.delete(row)
    session.commit()
    logger.debug(f"Friendship between {user_id} and {other_id} ended")


def set_favorite(
    session: Session, *, owner_id: int, friend_id: int, is_favorite: bool
) -> Friendship:
    friendship = get_friendship(session, owner_id, friend_id)
    if friendship is None:
        raise NotFound("Friend not found")
    friendship.is_favorite = is_favorite
    session.add(friendship)
    session.commit()
    session.refresh(friendship)
    return friendship


def block(session: Session, *, blocker_id: int, target_id: int) -> Block:
    """Block a user, tearing down whatever relationship the pair had"""
    if blocker_id == target_id:
        raise Forbidden("Cannot block yourself", ErrorCode.self_action)
    if session.get(User, target_id) is None:
        raise NotFound("User not found")
    if has_blocked(session, blocker_id, target_id):
        raise errors.already_blocked()

    were_friends = (
        session.exec(
            select(Friendship.id).where(_friendships_between(blocker_id, target_id))
        ).first()
        is not None
    )

    session.exec(delete(Friendship).where(_friendships_between(blocker_id, target_id)))
    session.exec(delete(FriendRequest).where(_requests_between(blocker_id, target_id)))
    session.exec(
        delete(Notification).where(
            _pair_filter(Notification, "user_id", "sender_id", blocker_id, target_id)
        )
    )
    if were_friends:
        # comments each one left on the other's posts go away with the friendship
        cross_comment_ids = select(Comment.id).join(Post, Post.id == Comment.post_id).where(
            or_(
                and_(Comment.author_id == target_id, Post.author_id == blocker_id),
                and_(Comment.author_id == blocker_id, Post.author_id == target_id),
            )
        )
        session.exec(
            delete(Comment).where(Comment.id.in_(cross_comment_ids))
        )

    block_row = Block(blocker_id=blocker_id, blocked_user_id=target_id, created_time=utcnow())
    session.add(block_row)
    _commit(session, errors.already_blocked())
    session.refresh(block_row)
    logger.info(
        f"User {blocker_id} blocked {target_id}"
        + (" (friendship removed)" if were_friends else "")
    )
    return block_row


def unblock(session: Session, *, blocker_id: int, target_id: int) -> None:
    block_row = session.exec(
        select(Block).where(
            Block.blocker_id == blocker_id,
            Block.blocked_user_id == target_id,
        )
    ).first()
    if block_row is None:
        raise errors.not_blocked()
    session.delete(block_row)
    session.commit()


def list_friends(session: Session, user_id: int) -> list[dict]:
    rows = session.exec(
        select(Friendship, User)
        .join(User, User.id == Friendship.friend_id)
        .where(Friendship.owner_id == user_id)
        .order_by(User.username)
    ).all()
    return [
        {
            "user": friend.summary(),
            "is_favorite": friendship.is_favorite,
            "last_read_post_id": friendship.last_read_post_id,
            "last_read_post_time": friendship.last_read_post_time.isoformat(),
            "since": friendship.created_time.isoformat(),
        }
        for friendship, friend in rows
    ]


def _request_entry(friend_request: FriendRequest, other: User) -> dict:
    return {
        "id": friend_request.id,
        "from_user_id": friend_request.from_user_id,
        "to_user_id": friend_request.to_user_id,
        "user": other.summary(),
        "created_time": friend_request.created_time.isoformat(),
    }


def list_incoming_requests(session: Session, user_id: int) -> list[dict]:
    rows = session.exec(
        select(FriendRequest, User)
        .join(User, User.id == FriendRequest.from_user_id)
        .where(FriendRequest.to_user_id == user_id)
        .order_by(FriendRequest.created_time, FriendRequest.id)
    ).all()
    return [_request_entry(fr, other) for fr, other in rows]


def list_outgoing_requests(session: Session, user_id: int) -> list[dict]:
    rows = session.exec(
        select(FriendRequest, User)
        .join(User, User.id == FriendRequest.to_user_id)
        .where(FriendRequest.from_user_id == user_id)
        .order_by(FriendRequest.created_time, FriendRequest.id)
    ).all()
    return [_request_entry(fr, other) for fr, other in rows]


def list_blocked_users(session: Session, blocker_id: int) -> list[dict]:
    users = session.exec(
        select(User)
        .join(Block, Block.blocked_user_id == User.id)
        .where(Block.blocker_id == blocker_id)
        .order_by(Block.created_time)
    ).all()
    return [user.summary() for user in users]


def relationship_status(session: Session, viewer_id: int, other_id: int) -> str:
    """Possible statuses: self, none, friends, pending_outgoing,
    pending_incoming, blocked, blocked_by
    """
    if viewer_id == other_id:
        return "self"
    if has_blocked(session, viewer_id, other_id):
        return "blocked"
    if has_blocked(session, other_id, viewer_id):
        return "blocked_by"
    if get_friendship(session, viewer_id, other_id):
        return "friends"

    pending = session.exec(
        select(FriendRequest).where(_requests_between(viewer_id, other_id))
    ).all()
    if any(fr.from_user_id == viewer_id for fr in pending):
        return "pending_outgoing"
    if pending:
        return "pending_incoming"
    return "none"
