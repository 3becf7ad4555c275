from fastapi import Depends, Request, HTTPException
from sqlmodel import Session

from models.common import get_session
from models.user import User
from services.context import Viewer


def get_current_user_id(request: Request) -> int | None:
    user_id = request.session.get("user_id")
    try:
        return int(user_id) if user_id is not None else None
    except (TypeError, ValueError):
        return None


def get_current_user(
    request: Request, session: Session = Depends(get_session)
) -> User | None:
    user_id = get_current_user_id(request)
    if not user_id:
        return None
    return session.get(User, user_id)


def current_user(user: User = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def current_viewer(user: User = Depends(current_user)) -> Viewer:
    return Viewer.from_user(user)
