from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from models.common import get_session
from routes.deps import current_viewer
from services.context import Viewer
from services.feed import friends_feed, get_feed, mark_read as svc_mark_read

router = APIRouter(prefix="/feed")


@router.get("/friends")
async def ranked_friends(
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    """The friends list for the feed page: unread first, then favorites and recency"""
    entries = friends_feed(session, viewer)
    return {"friends": [entry.to_dict() for entry in entries]}


@router.get("/{user_id}")
async def user_feed(
    user_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
    cursor: int | None = Query(None, description="Id of the last post already seen"),
):
    page = get_feed(session, viewer, user_id, cursor=cursor)
    return page.to_dict()


@router.post("/{user_id}/read")
async def mark_read(
    user_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    friendship = svc_mark_read(session, viewer, user_id)
    return {
        "last_read_post_id": friendship.last_read_post_id,
        "last_read_post_time": friendship.last_read_post_time.isoformat(),
    }
