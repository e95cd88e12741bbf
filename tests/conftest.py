"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own aiosqlite in-memory engine (StaticPool keeps
   the single connection alive) with tables created from the models.
2. get_db is overridden to hand every request the same session, so a
   test can inspect rows the API just wrote.
3. The process-wide response cache is cleared around every test.
4. Mail never leaves the process: get_mailer is overridden with a
   recording fake.

Environment is set before the app is imported because Settings is
validated at import time (no JWT secret → no app).
"""

import os

os.environ.setdefault("TASKMANAGER_JWT_SECRET", "test-secret-for-the-task-manager-suite")
os.environ.setdefault("TASKMANAGER_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TASKMANAGER_ENVIRONMENT", "development")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from taskmanager.cache import response_cache  # noqa: E402
from taskmanager.db.engine import get_db  # noqa: E402
from taskmanager.db.models import Base  # noqa: E402
from taskmanager.errors import MailDeliveryError  # noqa: E402
from taskmanager.mail import get_mailer  # noqa: E402
from taskmanager.main import app  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite://"

OWNER_EMAIL = "owner@example.com"


class FakeMailer:
    """Records messages instead of talking SMTP."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise MailDeliveryError()
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture(autouse=True)
def clear_cache():
    response_cache.clear()
    yield
    response_cache.clear()


@pytest_asyncio.fixture()
async def engine():
    """Per-test in-memory database with the schema created."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest_asyncio.fixture()
async def unauthenticated_client(db_session, mailer):
    """HTTP client with the real auth pipeline — tests must log in.

    Learn: Only get_db and get_mailer are overridden, so bearer tokens
    are really signed and verified.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(unauthenticated_client):
    """HTTP client whose requests are all authenticated as OWNER_EMAIL.

    Learn: Overrides get_current_user so task routes work without a
    token. Use unauthenticated_client for anything that tests the
    token flow itself.
    """
    from taskmanager.auth.dependencies import CurrentIdentity, get_current_user

    app.dependency_overrides[get_current_user] = lambda: CurrentIdentity(email=OWNER_EMAIL)
    yield unauthenticated_client
    app.dependency_overrides.pop(get_current_user, None)


async def signup_and_login(client: AsyncClient, email: str, password: str) -> dict:
    """Register `email` and return Authorization headers for it."""
    r = await client.post("/signUp", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    r = await client.post("/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest_asyncio.fixture()
async def auth_headers(unauthenticated_client):
    return await signup_and_login(unauthenticated_client, "alice@example.com", "alice-pw")
