"""Pytest configuration and fixtures for the RBAC core.

Integration tests run the real repositories on in-memory SQLite
(sqlite+aiosqlite, StaticPool); each test gets a fresh database.
FakeCache stands in for Redis behind ICacheService.
make_role / make_grant build DTOs for unit tests with mocked repositories.
"""

from datetime import datetime
from fnmatch import fnmatchcase
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rbac.application.dtos.role import RoleResult
from rbac.application.dtos.user_role import UserRoleResult
from rbac.composition import RbacServices, build_rbac_services
from rbac.core.config import Settings
from rbac.domain.enums import RoleKind
from rbac.infrastructure.persistence.database import (
    create_engine_for_url,
    create_session_factory,
    init_models,
)
from rbac.infrastructure.persistence.repositories import (
    RoleRepository,
    UserRoleRepository,
)
from rbac.shared.utils.datetime import utc_now

_TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_role(
    name: str,
    *,
    role_id: str | None = None,
    tenant_id: str | None = None,
    kind: RoleKind = RoleKind.CUSTOM,
    permissions: set[str] | frozenset[str] = frozenset(),
    inherited_roles: set[str] | frozenset[str] = frozenset(),
    is_active: bool = True,
) -> RoleResult:
    """RoleResult with id defaulting to role-<name>."""
    return RoleResult(
        id=role_id or f"role-{name}",
        name=name,
        tenant_id=tenant_id,
        kind=kind,
        permissions=frozenset(permissions),
        inherited_roles=frozenset(inherited_roles),
        is_active=is_active,
    )


def make_grant(
    user_id: str = "user-1",
    role_id: str = "role-1",
    *,
    grant_id: str = "grant-1",
    tenant_id: str | None = None,
    is_active: bool = True,
    expires_at: datetime | None = None,
    **extra: Any,
) -> UserRoleResult:
    """UserRoleResult assigned now."""
    return UserRoleResult(
        id=grant_id,
        user_id=user_id,
        role_id=role_id,
        tenant_id=tenant_id,
        is_active=is_active,
        assigned_at=utc_now(),
        expires_at=expires_at,
        **extra,
    )


class FakeCache:
    """In-memory ICacheService with glob pattern delete."""

    def __init__(self, available: bool = True) -> None:
        self.store: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}
        self.available = available

    def is_available(self) -> bool:
        return self.available

    async def get(self, key: str) -> Any:
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> bool:
        return self.store.pop(key, None) is not None

    async def delete_pattern(self, pattern: str) -> int:
        doomed = [k for k in self.store if fnmatchcase(k, pattern)]
        for key in doomed:
            del self.store[key]
        return len(doomed)


@pytest.fixture
def settings() -> Settings:
    """Settings pinned for tests (no Redis, one-level inheritance)."""
    return Settings(
        database_url=_TEST_DATABASE_URL,
        role_inheritance_depth=1,
        redis_enabled=False,
    )


@pytest.fixture
async def db_session() -> AsyncSession:
    """Session on a fresh in-memory SQLite database with tables created.

    Rolled back and disposed after the test. Mark tests using it with
    @pytest.mark.requires_db.
    """
    engine = create_engine_for_url(_TEST_DATABASE_URL)
    await init_models(engine)
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        yield session
        await session.rollback()
    await engine.dispose()


@pytest.fixture
def role_repo(db_session: AsyncSession) -> RoleRepository:
    return RoleRepository(db_session)


@pytest.fixture
def user_role_repo(db_session: AsyncSession) -> UserRoleRepository:
    return UserRoleRepository(db_session)


@pytest.fixture
def services(db_session: AsyncSession, settings: Settings) -> RbacServices:
    """All RBAC services over db_session, without a cache."""
    return build_rbac_services(db_session, settings=settings)


@pytest.fixture
async def session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory on a fresh in-memory SQLite database, for tests that commit."""
    engine = create_engine_for_url(_TEST_DATABASE_URL)
    await init_models(engine)
    yield create_session_factory(engine)
    await engine.dispose()
