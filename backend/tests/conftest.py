"""Test configuration and fixtures for Huddle backend tests."""

import datetime
import os
import sys
import pathlib
import pytest
from unittest.mock import patch


from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

BACKEND_DIR = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# Set test environment before importing backend modules
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SESSION_SECRET_KEY"] = "test_secret_key"
os.environ["TESTING_MODE"] = "True"
os.environ["API_PREFIX"] = ""


@pytest.fixture(autouse=True)
def test_engine():
    """Create a test database engine."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # Ensure models are imported so tables are registered in SQLModel.metadata
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def test_session(test_engine):
    """Create a test database session, configured like the app's."""
    with Session(test_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def override_get_session(test_session):
    """Override the get_session dependency for testing."""

    def _override_get_session():
        yield test_session

    return _override_get_session


@pytest.fixture
def test_app(override_get_session):
    """Create a test FastAPI application."""
    # the tables already exist on the test engine
    with patch("app.init_db"):
        from app import create_app

        app = create_app()
        from models.common import get_session

        app.dependency_overrides[get_session] = override_get_session
        yield app
        app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client."""
    with TestClient(test_app) as client:
        yield client


@pytest.fixture
def login(test_app):
    """Act as the given user in the following requests"""
    from routes.deps import get_current_user

    def _login(user):
        test_app.dependency_overrides[get_current_user] = lambda: user

    return _login


@pytest.fixture
def make_user(test_session):
    """Factory creating users with a username and a display name."""
    from models.user import User

    def _make_user(username: str, name: str | None = None, **kwargs):
        user = User(username=username, name=name or username.title(), **kwargs)
        test_session.add(user)
        test_session.commit()
        test_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def viewer_of():
    from services.context import Viewer

    return Viewer.from_user


@pytest.fixture
def make_friends(test_session):
    """Create both friendship rows directly, bypassing the request flow."""
    from models.friendship import Friendship

    def _make_friends(a, b, a_favorite=False, b_favorite=False, last_read=None):
        last_read = last_read or datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)
        rows = (
            Friendship(
                owner_id=a.id,
                friend_id=b.id,
                is_favorite=a_favorite,
                last_read_post_time=last_read,
            ),
            Friendship(
                owner_id=b.id,
                friend_id=a.id,
                is_favorite=b_favorite,
                last_read_post_time=last_read,
            ),
        )
        test_session.add_all(rows)
        test_session.commit()
        return rows

    return _make_friends


@pytest.fixture
def make_post(test_session):
    """Store a post with a fixed creation time (defaults to now)."""
    from models.post import Post

    def _make_post(author, text="hello", created_time=None, **kwargs):
        created_time = created_time or datetime.datetime.now(datetime.timezone.utc)
        post = Post(
            author_id=author.id,
            content=[{"type": "text", "text": text}],
            created_time=created_time,
            updated_time=created_time,
            **kwargs,
        )
        test_session.add(post)
        test_session.commit()
        test_session.refresh(post)
        return post

    return _make_post


@pytest.fixture(autouse=True)
def reset_database_state(test_session):
    """Reset database state after each test."""
    yield
    if test_session.in_transaction():
        test_session.rollback()

    from sqlalchemy import text

    for table in reversed(SQLModel.metadata.sorted_tables):
        test_session.execute(text(f"DELETE FROM {table.name}"))
    test_session.commit()
