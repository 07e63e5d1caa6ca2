# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
# Minimum bcrypt work factor keeps the suite fast.
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

from buzznet.core.security import create_access_token, hash_password  # noqa: E402
from buzznet.db.session import Base  # noqa: E402
from buzznet.db.session import get_db as app_get_session  # noqa: E402
from buzznet.db.time import utcnow  # noqa: E402
from buzznet.main import app as fastapi_app  # noqa: E402
from buzznet.models import Post, User, UserRole  # noqa: E402
from buzznet.services.accounts import AccountGuard  # noqa: E402
from buzznet.services.engagement import EngagementService  # noqa: E402

TEST_DB_URL = "sqlite://"
PASSWORD = "Aa1aaaaa"

_EMAIL_COUNTER = count(1)


class FrozenClock:
    """Manually advanced clock for lockout tests."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


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
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
        # Ensure each test sees a clean database.
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


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(utcnow())


@pytest.fixture()
def guard(db_session: Session, clock: FrozenClock) -> AccountGuard:
    """Account guard driven by the frozen clock."""
    return AccountGuard(db_session, clock=clock)


@pytest.fixture()
def engagement(db_session: Session) -> EngagementService:
    return EngagementService(db_session)


@pytest.fixture()
def password() -> str:
    """Plain-text password shared by every fixture user."""
    return PASSWORD


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with the shared test password."""

    def _make_user(username: str | None = None, role: UserRole = UserRole.USER) -> User:
        n = next(_EMAIL_COUNTER)
        name = username or f"user{n}"
        user = User(
            username=name,
            email=f"{name}.{n}@example.com",
            password_hash=hash_password(PASSWORD),
            role=role,
            login_attempts=0,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol")


@pytest.fixture()
def admin(make_user: Callable[..., User]) -> User:
    return make_user("root", role=UserRole.ADMIN)


def _bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Return a helper building authorization headers for any user."""
    return _bearer


@pytest.fixture()
def alice_headers(alice: User) -> dict[str, str]:
    return _bearer(alice)


@pytest.fixture()
def bob_headers(bob: User) -> dict[str, str]:
    return _bearer(bob)


@pytest.fixture()
def admin_headers(admin: User) -> dict[str, str]:
    return _bearer(admin)


@pytest.fixture()
def post(engagement: EngagementService, alice: User) -> Post:
    """A post authored by alice."""
    return engagement.create_post(alice.id, "T", "C")
