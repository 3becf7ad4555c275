import re
import tomllib

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlmodel import Session, select

from models.common import get_session
from models.user import User
from routes.deps import current_viewer, get_current_user
from services.context import Viewer
from services.errors import Conflict, ErrorCode, InvalidInput, NotFound
from services.friendship import relationship_status
from settings import PROJECT_PATH

router = APIRouter()

USERNAME_RE = re.compile(r"^\w{1,40}$")
NAME_MAX_LENGTH = 50


def get_version() -> str:
    with open(PROJECT_PATH / "pyproject.toml", "rb") as f:
        pyproject = tomllib.load(f)
    return pyproject["project"]["version"]


def _user_dict(user: User) -> dict:
    return user.summary() | {
        "bio": user.bio,
        "created_time": user.created_time.isoformat(),
    }


def _validate_username(username: str) -> str:
    # usernames must stay matchable by @mentions
    username = (username or "").strip()
    if not USERNAME_RE.match(username):
        raise InvalidInput(
            "Username must be 1 to 40 letters, digits or underscores",
            ErrorCode.invalid_content,
        )
    return username


@router.get("/")
async def index():
    return {"version": get_version(), "status": "ok"}


@router.get("/user/me")
async def get_current_user_info(
    user: User | None = Depends(get_current_user),
):
    if not user:
        return {"user": None}
    return {"user": _user_dict(user)}


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out successfully"}


class UsernameUpdate(BaseModel):
    username: str


@router.post("/user/username")
async def set_username(
    payload: UsernameUpdate,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    desired = _validate_username(payload.username)

    existing = session.exec(select(User).where(User.username == desired)).first()
    if existing and existing.id != viewer.id:
        raise Conflict("Username already taken", ErrorCode.username_taken)

    db_user = session.get(User, viewer.id)
    db_user.username = desired
    session.add(db_user)
    session.commit()
    return {"user": _user_dict(db_user)}


class NameUpdate(BaseModel):
    name: str


@router.post("/user/name")
async def set_name(
    payload: NameUpdate,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    name = (payload.name or "").strip()
    if not name or len(name) > NAME_MAX_LENGTH:
        raise InvalidInput(
            f"Name must be 1 to {NAME_MAX_LENGTH} characters", ErrorCode.invalid_content
        )

    db_user = session.get(User, viewer.id)
    db_user.name = name
    session.add(db_user)
    session.commit()
    return {"user": _user_dict(db_user)}


@router.get("/username/exists/{username}")
async def username_exists(username: str, session: Session = Depends(get_session)):
    username = _validate_username(username)
    existing = session.exec(select(User.id).where(User.username == username)).first()
    return {"exists": existing is not None}


@router.get("/users/{username}")
async def user_profile(
    username: str,
    session: Session = Depends(get_session),
    viewer: Viewer = Depends(current_viewer),
):
    user = session.exec(select(User).where(User.username == username)).first()
    if not user:
        raise NotFound("User not found")
    return {
        "user": _user_dict(user),
        "relationship": relationship_status(session, viewer.id, user.id),
    }
