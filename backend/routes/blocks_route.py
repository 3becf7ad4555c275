from fastapi import APIRouter, Depends
from sqlmodel import Session

from models.common import get_session
from routes.deps import current_viewer
from services.context import Viewer
from services.friendship import (
    block as svc_block,
    list_blocked_users,
    unblock as svc_unblock,
)

router = APIRouter(prefix="/blocks")


@router.get("")
async def blocked_users(
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"blocked": list_blocked_users(session, viewer.id)}


@router.post("/{user_id}")
async def block_user(
    user_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    block = svc_block(session, blocker_id=viewer.id, target_id=user_id)
    return {
        "block": {
            "blocker_id": block.blocker_id,
            "blocked_user_id": block.blocked_user_id,
            "created_time": block.created_time.isoformat(),
        }
    }


@router.delete("/{user_id}")
async def unblock_user(
    user_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    svc_unblock(session, blocker_id=viewer.id, target_id=user_id)
    return {"message": "Unblocked"}
