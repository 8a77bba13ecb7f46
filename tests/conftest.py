from collections.abc import Callable
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from dramahub.application.credentials import CookieConfig, CredentialCodec
from dramahub.application.session_store import SessionStore
from dramahub.constants import DEV_COOKIE_NAME
from dramahub.domain.entities import Admin, utcnow
from dramahub.infrastructure.database import models  # noqa: F401
from dramahub.infrastructure.database.database import (
    enable_sqlite_foreign_keys,
    get_session,
)
from dramahub.infrastructure.database.repositories import AdminRepository
from dramahub.infrastructure.security.passwords import hash_password
from dramahub.main import app

ADMIN_USERNAME = "editor"
ADMIN_PASSWORD = "correct-horse-battery"


class FakeClock:
    """Settable clock for expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(name="session")
def session_fixture():
    # In-memory SQLite shared across the TestClient threadpool
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, 0))


@pytest.fixture(name="codec")
def codec_fixture() -> CredentialCodec:
    return CredentialCodec(CookieConfig.for_environment(production=False))


@pytest.fixture(name="store")
def store_fixture(session: Session, clock: FakeClock) -> SessionStore:
    return SessionStore(session, clock=clock)


@pytest.fixture(name="admin")
def admin_fixture(session: Session) -> Admin:
    return AdminRepository(session).add(
        username=ADMIN_USERNAME,
        password_hash=hash_password(ADMIN_PASSWORD),
        display_name="Editor",
    )


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="login")
def login_fixture(client: TestClient) -> Callable[..., str]:
    """Log in through the form endpoint and return the issued token."""

    def _login(username: str = ADMIN_USERNAME, password: str = ADMIN_PASSWORD) -> str:
        response = client.post(
            "/admin/login",
            data={"username": username, "password": password},
            follow_redirects=False,
        )
        assert response.status_code == 302, response.text
        token = response.cookies.get(DEV_COOKIE_NAME)
        assert token
        return token

    return _login


@pytest.fixture(name="admin_client")
def admin_client_fixture(
    client: TestClient, admin: Admin, login: Callable[..., str]
) -> TestClient:
    login()
    return client
