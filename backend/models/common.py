"""Common database utilities and base models"""

import sqlmodel
from sqlalchemy.exc import IntegrityError
from sqlmodel import create_engine, Session
from typing import Generator

_engine = None


def get_engine():  # pragma: no cover
    global _engine
    if _engine is None:
        from settings import DATABASE_URL

        connect_args = {}
        if DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(DATABASE_URL, connect_args=connect_args)
    return _engine


def init_db(engine=None):  # pragma: no cover
    """Create the missing tables"""
    import models  # noqa: F401 - registers the tables in the metadata

    sqlmodel.SQLModel.metadata.create_all(engine or get_engine())


def get_session() -> Generator[Session, None, None]:  # pragma: no cover
    """Get database session for FastAPI dependency, always closes session."""
    session = Session(get_engine(), expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


def is_unique_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError indicates a unique-constraint conflict."""
    original = getattr(error, "orig", None)
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    if sqlstate == "23505":
        return True
    message = str(original or error).lower()
    return "duplicate key" in message or "unique constraint" in message


def parse_bool(bool_str: str | bool):
    if isinstance(bool_str, str):
        return bool_str.lower() in ("true", "1")
    return bool(bool_str)
