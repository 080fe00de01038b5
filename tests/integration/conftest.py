"""Integration test fixtures for database and HTTP client operations.

Tables are created from the SQLModel metadata in a fresh in-memory SQLite
database per test. Redis is replaced by fakeredis; email and realtime
events are recorded in memory.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from src.teamledger import models  # noqa: F401 - registers tables on the metadata
from src.teamledger.api.dependencies import (
    get_broadcaster,
    get_db_session,
    get_membership_cache,
    get_notification_dispatcher,
)
from src.teamledger.core import redis as redis_core
from src.teamledger.core.config import get_settings
from src.teamledger.core.db import get_session
from src.teamledger.core.security import TokenService
from src.teamledger.main import create_app
from src.teamledger.repositories import (
    AuditLogRepository,
    InviteRepository,
    MembershipRepository,
    OrganizationRepository,
    OtpRepository,
    RefreshTokenRepository,
    UserRepository,
)
from src.teamledger.services import (
    AuditService,
    AuthorizationGate,
    AuthService,
    InviteService,
    MembershipCache,
    MembershipService,
    OrganizationService,
)
from tests.helpers import RecordingBroadcaster, RecordingNotifier


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Keep the module-level Redis client from leaking across event loops."""
    redis_core.reset_redis_state()
    yield
    await redis_core.close_redis()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory database shared by every session of one test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session configured like the application's."""
    async with get_session(engine) as session:
        yield session


# --- Collaborators ---


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService.from_settings(get_settings())


@pytest.fixture
def membership_cache(fake_redis: Redis) -> MembershipCache:
    return MembershipCache(fake_redis, ttl_seconds=300)


# --- Services wired to the test session ---


@pytest.fixture
def audit_service(db_session: AsyncSession) -> AuditService:
    return AuditService(AuditLogRepository(db_session), db_session)


@pytest.fixture
def auth_service(db_session, token_service, notifier) -> AuthService:
    return AuthService(
        UserRepository(db_session),
        OtpRepository(db_session),
        RefreshTokenRepository(db_session),
        OrganizationRepository(db_session),
        MembershipRepository(db_session),
        InviteRepository(db_session),
        db_session,
        token_service,
        notifier,
    )


@pytest.fixture
def organization_service(
    db_session, membership_cache, audit_service, broadcaster
) -> OrganizationService:
    return OrganizationService(
        OrganizationRepository(db_session),
        MembershipRepository(db_session),
        db_session,
        membership_cache,
        audit_service,
        broadcaster,
    )


@pytest.fixture
def membership_service(
    db_session, membership_cache, audit_service, broadcaster
) -> MembershipService:
    return MembershipService(
        MembershipRepository(db_session),
        UserRepository(db_session),
        db_session,
        membership_cache,
        audit_service,
        broadcaster,
    )


@pytest.fixture
def invite_service(
    db_session, membership_cache, audit_service, notifier, broadcaster
) -> InviteService:
    return InviteService(
        InviteRepository(db_session),
        OrganizationRepository(db_session),
        MembershipRepository(db_session),
        UserRepository(db_session),
        db_session,
        membership_cache,
        audit_service,
        notifier,
        broadcaster,
    )


@pytest.fixture
def gate(db_session, token_service, membership_cache) -> AuthorizationGate:
    return AuthorizationGate(
        token_service,
        UserRepository(db_session),
        OrganizationRepository(db_session),
        MembershipRepository(db_session),
        membership_cache,
    )


# --- HTTP client ---


@pytest.fixture
async def client(
    engine: AsyncEngine,
    fake_redis: Redis,
    notifier: RecordingNotifier,
    broadcaster: RecordingBroadcaster,
) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client against the app, with the test database and fakes."""
    app = create_app()

    async def _get_db_session() -> AsyncGenerator[AsyncSession]:
        async with get_session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = _get_db_session
    app.dependency_overrides[get_membership_cache] = lambda: MembershipCache(fake_redis)
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    app.dependency_overrides[get_notification_dispatcher] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
