# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("SMTP_HOST", "")

from deiwy.core.security import sign_session_id
from deiwy.core.settings import settings
from deiwy.db.session import Base
from deiwy.db.session import get_db as app_get_session
from deiwy.main import app as fastapi_app
from deiwy.models import User
from deiwy.services import verification
from deiwy.services.mailer import get_mailer
from deiwy.services.session_store import USER_KEY, SessionState, SessionStore

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "Passw0rd!"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
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
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


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


@pytest.fixture(autouse=True)
def reset_outbox_and_codes() -> Iterator[None]:
    """Start every test with no stored verification codes and an empty outbox."""
    verification._CODE_CACHE.clear()
    get_mailer().sent.clear()
    yield
    verification._CODE_CACHE.clear()
    get_mailer().sent.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def async_client_factory(app: FastAPI) -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient that talks to the app in-process.

    Tests own the client: ``async with async_client_factory() as http: ...``.
    """

    def _build(**kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://test",
            **kwargs,
        )

    return _build


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with valid defaults."""

    def _make(
        *,
        firstname: str = "Jane",
        lastname: str = "Doe",
        username: str | None = None,
        email: str | None = None,
        password: str = TEST_PASSWORD,
        is_verified: bool = False,
    ) -> User:
        n = next(_USER_COUNTER)
        user = User(
            firstname=firstname,
            lastname=lastname,
            username=username or f"user_{n}",
            email=email or f"user{n}@example.com",
            password=password,
            is_verified=is_verified,
        )
        db_session.add(user)
        db_session.flush()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def unverified_user(make_user: Callable[..., User]) -> User:
    return make_user(username="jane", email="jane@x.com")


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """A verified user who can use the messaging API."""
    return make_user(username="alice", email="alice@example.com", firstname="Alice", is_verified=True)


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    return make_user(username="bob", email="bob@example.com", firstname="Bob", is_verified=True)


@pytest.fixture()
def sign_in(db_session: Session) -> Callable[[httpx.Client | httpx.AsyncClient, User], SessionState]:
    """Return a helper that opens a session for ``user`` and sets its cookie on ``http``."""

    def _sign_in(http: httpx.Client | httpx.AsyncClient, user: User) -> SessionState:
        state = SessionStore(db_session).create({USER_KEY: user.user_id})
        http.cookies.set(settings.session_cookie_name, sign_session_id(state.session_id))
        return state

    return _sign_in
