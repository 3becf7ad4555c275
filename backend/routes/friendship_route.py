from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from models.common import get_session
from routes.deps import current_viewer
from services.context import Viewer
from services.friendship import (
    accept_request as svc_accept_request,
    cancel_request as svc_cancel_request,
    list_friends,
    list_incoming_requests,
    list_outgoing_requests,
    reject_request as svc_reject_request,
    send_request as svc_send_request,
    set_favorite as svc_set_favorite,
    unfriend as svc_unfriend,
)

router = APIRouter(prefix="/friends")


class FavoriteUpdate(BaseModel):
    enabled: bool


def _friendship_dict(friendship) -> dict:
    return {
        "owner_id": friendship.owner_id,
        "friend_id": friendship.friend_id,
        "is_favorite": friendship.is_favorite,
        "last_read_post_id": friendship.last_read_post_id,
        "last_read_post_time": friendship.last_read_post_time.isoformat(),
    }


@router.get("")
async def friends(
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"friends": list_friends(session, viewer.id)}


@router.get("/requests")
async def incoming_requests(
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"requests": list_incoming_requests(session, viewer.id)}


@router.get("/requests/outgoing")
async def outgoing_requests(
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"requests": list_outgoing_requests(session, viewer.id)}


@router.post("/request/{user_id}")
async def send_friend_request(
    user_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    fr = svc_send_request(session, sender=viewer, recipient_id=user_id)
    return {
        "request": {
            "id": fr.id,
            "from_user_id": fr.from_user_id,
            "to_user_id": fr.to_user_id,
            "created_time": fr.created_time.isoformat(),
        }
    }


@router.post("/requests/{request_id}/accept")
async def accept_request(
    request_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    own_row, other_row = svc_accept_request(
        session, request_id=request_id, accepting=viewer
    )
    return {"friendships": [_friendship_dict(own_row), _friendship_dict(other_row)]}


@router.post("/requests/{request_id}/reject")
async def reject_request(
    request_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    svc_reject_request(session, request_id=request_id, rejecting=viewer)
    return {"message": "Friend request rejected"}


@router.post("/requests/{request_id}/cancel")
async def cancel_request(
    request_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    svc_cancel_request(session, request_id=request_id, cancelling=viewer)
    return {"message": "Friend request cancelled"}


@router.delete("/{user_id}")
async def unfriend(
    user_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    svc_unfriend(session, user_id=viewer.id, other_id=user_id)
    return {"message": "Unfriended"}


@router.post("/{user_id}/favorite")
async def set_favorite(
    user_id: int,
    payload: FavoriteUpdate,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    friendship = svc_set_favorite(
        session, owner_id=viewer.id, friend_id=user_id, is_favorite=payload.enabled
    )
    return {"friendship": _friendship_dict(friendship)}
