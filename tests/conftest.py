# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("IDENTITY_SECRET", "test-identity-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from pulse_feed.core.security import create_principal_token  # noqa: E402
from pulse_feed.db.session import Base  # noqa: E402
from pulse_feed.db.session import get_db as app_get_session  # noqa: E402
from pulse_feed.main import app as fastapi_app  # noqa: E402
from pulse_feed.models import Post, User  # noqa: E402
from pulse_feed.schemas.user import Principal  # noqa: E402
from pulse_feed.services import mutations  # noqa: E402
from pulse_feed.services.identity import resolve_user  # noqa: E402

TEST_DB_URL = "sqlite://"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _principal(handle: str) -> Principal:
    return Principal(
        principal_id=f"idp|{handle}",
        display_name=handle.title(),
        username=handle,
        avatar_url=f"https://img.example/{handle}.png",
    )


@pytest.fixture()
def make_user(db_session: Session) -> Callable[[str], User]:
    """Return a factory creating users the way a first login would."""

    def _make(handle: str) -> User:
        return resolve_user(db_session, _principal(handle))

    return _make


@pytest.fixture()
def alice(make_user: Callable[[str], User]) -> User:
    return make_user("alice")


@pytest.fixture()
def bob(make_user: Callable[[str], User]) -> User:
    return make_user("bob")


@pytest.fixture()
def carol(make_user: Callable[[str], User]) -> User:
    return make_user("carol")


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for a user's principal."""

    def _headers(user: User) -> dict[str, str]:
        token = create_principal_token(
            user.principal_id,
            {"name": user.name, "preferred_username": user.username},
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory creating posts through the mutation coordinator."""

    def _make(author: User, content: str = "Test post content", parent_id: int | None = None) -> Post:
        return mutations.create_post(db_session, author, content, parent_id)

    return _make
