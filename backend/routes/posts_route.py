from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from models.common import get_session
from routes.deps import current_viewer
from services import posts as svc
from services.context import Viewer

router = APIRouter(prefix="/posts")


class PostPayload(BaseModel):
    content: Any = None


class CommentPayload(BaseModel):
    content: Any = None


class FlagPayload(BaseModel):
    enabled: bool


@router.post("")
async def create_post(
    payload: PostPayload,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"post": svc.create_post(session, viewer, payload.content)}


@router.get("/{post_id}")
async def get_post(
    post_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"post": svc.get_post(session, viewer, post_id)}


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    payload: PostPayload,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"post": svc.update_post(session, viewer, post_id, payload.content)}


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    svc.delete_post(session, viewer, post_id)
    return {"message": "Post deleted"}


@router.post("/{post_id}/like")
async def like_post(
    post_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"likes": svc.like_post(session, viewer, post_id)}


@router.post("/{post_id}/unlike")
async def unlike_post(
    post_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"likes": svc.unlike_post(session, viewer, post_id)}


@router.post("/{post_id}/comments-disabled")
async def set_comments_disabled(
    post_id: int,
    payload: FlagPayload,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"post": svc.set_comments_disabled(session, viewer, post_id, payload.enabled)}


@router.post("/{post_id}/favorites-only")
async def set_favorites_only(
    post_id: int,
    payload: FlagPayload,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"post": svc.set_favorites_only(session, viewer, post_id, payload.enabled)}


@router.get("/{post_id}/comments")
async def list_comments(
    post_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"comments": svc.list_comments(session, viewer, post_id)}


@router.post("/{post_id}/comments")
async def create_comment(
    post_id: int,
    payload: CommentPayload,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    return {"comment": svc.create_comment(session, viewer, post_id, payload.content)}


@router.delete("/{post_id}/comments/{comment_id}")
async def delete_comment(
    post_id: int,
    comment_id: int,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    svc.delete_comment(session, viewer, post_id, comment_id)
    return {"message": "Comment deleted"}
