"""Pytest configuration and fixtures for libris.

Environment is set before any libris import so Settings validation passes and
bcrypt stays fast. Every test gets its own SQLite file (aiosqlite) with the
schema created from the ORM metadata, and a notifier whose dispatcher records
messages instead of sending them.
"""

import html
import os
import re

os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_BACKEND"] = "log"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SESSION_REVOCATION_ENABLED"] = "false"
os.environ["PUBLIC_BASE_URL"] = "http://libris.test"

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from libris.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from libris.application.services.account_kinds import ADMIN_KIND, USER_KIND  # noqa: E402
from libris.application.services.identity_service import IdentityLifecycleManager  # noqa: E402
from libris.api.v1.dependencies import build_identity_manager  # noqa: E402
from libris.infrastructure.external.email import (  # noqa: E402
    BestEffortNotifier,
    EmailTemplateRenderer,
)
from libris.infrastructure.persistence import database  # noqa: E402
from libris.infrastructure.persistence import models  # noqa: E402,F401
from libris.infrastructure.persistence.database import Base, build_engine  # noqa: E402
from libris.infrastructure.security import SessionTokenIssuer  # noqa: E402
from libris.shared.utils.datetime import ensure_utc, utc_now  # noqa: E402

STRONG_PASSWORD = "Abcd123!"


class RecordingDispatcher:
    """INotificationDispatcher that keeps every message in memory."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.connected = False
        self.fail_next = 0

    async def connect(self) -> None:
        self.connected = True

    async def send(self, to_address: str, subject: str, html_body: str) -> None:
        if self.fail_next:
            self.fail_next -= 1
            raise ConnectionError("SMTP server unavailable")
        self.sent.append({"to": to_address, "subject": subject, "html": html_body})

    async def close(self) -> None:
        self.connected = False

    def to(self, address: str) -> list[dict[str, str]]:
        return [m for m in self.sent if m["to"] == address]

    def last_to(self, address: str) -> dict[str, str]:
        messages = self.to(address)
        assert messages, f"no email sent to {address}"
        return messages[-1]


class InMemoryRevocationStore:
    """IRevocationStore kept in a dict; honours expiry like the Redis TTL."""

    def __init__(self) -> None:
        self.revoked: dict[str, datetime] = {}

    async def revoke(self, token_id: str, expires_at: datetime) -> None:
        self.revoked[token_id] = ensure_utc(expires_at)

    async def is_revoked(self, token_id: str) -> bool:
        expires_at = self.revoked.get(token_id)
        return expires_at is not None and utc_now() < expires_at


def link_token(html_body: str, path: str) -> str:
    """Extract the token that follows path (e.g. '/verify/') in an emailed link."""
    match = re.search(re.escape(path) + r"([A-Za-z0-9_\-]+)", html_body)
    assert match, f"no {path} link in email"
    return match.group(1)


def temp_password(html_body: str) -> str:
    """Extract the temporary password from the admin welcome email."""
    match = re.search(r"<strong>(.+?)</strong>", html_body)
    assert match, "no temporary password in email"
    return html.unescape(match.group(1))


@pytest.fixture
async def engine(tmp_path):
    """Per-test SQLite database with all tables created."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'libris-test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    """Session for repository and lifecycle tests. Rolls back after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
async def notifier(dispatcher: RecordingDispatcher) -> BestEffortNotifier:
    test_notifier = BestEffortNotifier(dispatcher, EmailTemplateRenderer(app_name="libris-test"))
    yield test_notifier
    await test_notifier.drain()


@pytest.fixture
def session_issuer() -> SessionTokenIssuer:
    return SessionTokenIssuer()


@pytest.fixture
def user_manager(db_session, notifier, session_issuer) -> IdentityLifecycleManager:
    return build_identity_manager(USER_KIND, db_session, notifier, session_issuer)


@pytest.fixture
def admin_manager(db_session, notifier, session_issuer) -> IdentityLifecycleManager:
    return build_identity_manager(ADMIN_KIND, db_session, notifier, session_issuer)


@pytest.fixture
def app(session_factory, notifier) -> FastAPI:
    """FastAPI app bound to the per-test database and recording notifier."""
    from libris.main import create_app

    application = create_app()

    async def _db():
        async with session_factory() as session:
            yield session

    async def _db_transactional():
        async with session_factory() as session:
            async with session.begin():
                yield session

    application.dependency_overrides[database.get_db] = _db
    application.dependency_overrides[database.get_db_transactional] = _db_transactional
    application.state.notifier = notifier
    application.state.revocation_store = None
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
