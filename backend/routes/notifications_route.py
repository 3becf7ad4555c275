from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from models.common import get_session
from routes.deps import current_viewer
from services.context import Viewer
from services.notifications import list_notifications, mark_all_read

router = APIRouter(prefix="/notifications")


@router.get("")
async def notifications(
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
    cursor: int | None = None,
    limit: int = Query(50, ge=1, le=100),
):
    return list_notifications(session, viewer.id, cursor=cursor, limit=limit)


@router.post("/read")
async def read_all(
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    mark_all_read(session, viewer.id)
    return {"message": "Notifications marked as read"}
