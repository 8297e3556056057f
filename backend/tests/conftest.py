"""Shared test fixtures for the Typecraft backend test suite.

Tests run against a SQLite file in a temporary directory. The app creates
its tables on import; each test starts from empty tables.
"""

import os
import tempfile

# Point the app at a throwaway database before any app imports.
_TEST_DIR = tempfile.mkdtemp(prefix="typecraft-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["LOG_FORMAT"] = "text"
os.environ["SUMMARY_MODEL"] = ""
os.environ["SUMMARY_API_KEY"] = ""

import pytest
from sqlalchemy import text
from fastapi.testclient import TestClient

from typecraft.database import get_db, SessionLocal
from typecraft.main import app
from typecraft.core.auth import AuthContext
from typecraft.core.config import settings
from typecraft.core.token_factory import create_token
from typecraft.middleware.request_context import throttle
from typecraft.models import Category, Text, User
from typecraft.services import auth_service

# Children first so foreign keys never block the delete.
_CLEAN_TABLES = ["texts", "categories", "users"]


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all data tables before each test for isolation.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    db = SessionLocal()
    try:
        for table in _CLEAN_TABLES:
            db.execute(text(f"DELETE FROM {table}"))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    throttle.reset()  # so tests never hit 429 from earlier logins
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def request_scoped_client():
    """TestClient on the real get_db: every request opens and closes its own session."""
    throttle.reset()
    with TestClient(app) as c:
        yield c


def make_user(db, username: str = "alice", password: str = "correct-horse") -> User:
    return auth_service.register_user(db, username, password)


def headers_for(user: User) -> dict:
    token = create_token(user.id, user.username, settings.secret_key)
    return {"Authorization": f"Bearer {token}"}


def principal_for(user: User) -> AuthContext:
    return AuthContext(user_id=user.id, username=user.username)


def make_text(db, user: User, title: str = "Sample", content: str = "Hello world.",
              category: Category = None, **overrides) -> Text:
    text_row = Text(
        user_id=user.id,
        title=title,
        content=content,
        category_id=category.id if category is not None else None,
        **overrides,
    )
    db.add(text_row)
    db.commit()
    db.refresh(text_row)
    return text_row


def make_category(db, user: User, name: str = "Folder", parent: Category = None) -> Category:
    category = Category(user_id=user.id, name=name, parent_id=parent.id if parent is not None else None)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture()
def alice(db) -> User:
    return make_user(db, "alice")


@pytest.fixture()
def bob(db) -> User:
    return make_user(db, "bob")


@pytest.fixture()
def alice_headers(alice) -> dict:
    return headers_for(alice)


@pytest.fixture()
def bob_headers(bob) -> dict:
    return headers_for(bob)
