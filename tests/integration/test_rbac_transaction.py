"""rbac_transaction: commit first, then clear the permission cache."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rbac.application.dtos.role import RoleCreate
from rbac.composition import rbac_transaction
from rbac.core.config import Settings
from rbac.infrastructure.persistence.repositories import UserRoleRepository
from tests.conftest import FakeCache

STALE_KEY = "permission:global:U"


@pytest.mark.requires_db
async def test_cache_cleared_only_after_commit(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    cache = FakeCache()
    async with rbac_transaction(cache, settings, session_factory) as services:
        role = await services.roles.create_role(
            RoleCreate(name="editor", permissions=["leads:read"])
        )
        cache.store[STALE_KEY] = []
        await services.assignments.assign_role_to_user("U", role.id)

        assert STALE_KEY in cache.store
        assert services.authorization.has_pending_invalidations()

    assert STALE_KEY not in cache.store
    assert not services.authorization.has_pending_invalidations()

    async with rbac_transaction(cache, settings, session_factory) as services:
        assert await services.authorization.check_permission("U", "leads:read")
    assert cache.store[STALE_KEY] == ["leads:read"]


@pytest.mark.requires_db
async def test_rollback_keeps_cache_and_drops_writes(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> None:
    cache = FakeCache()
    cache.store[STALE_KEY] = []

    with pytest.raises(RuntimeError):
        async with rbac_transaction(cache, settings, session_factory) as services:
            role = await services.roles.create_role(
                RoleCreate(name="editor", permissions=["leads:read"])
            )
            await services.assignments.assign_role_to_user("U", role.id)
            raise RuntimeError("abort")

    assert cache.store == {STALE_KEY: []}
    assert not services.authorization.has_pending_invalidations()
    async with session_factory() as session:
        assert await UserRoleRepository(session).list_by_user("U", None) == []
