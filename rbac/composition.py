"""Composition root: wire repositories, resolver, cache and services for one session.

The cache is created once per process (CacheService.connect() at startup)
and passed in; everything else is built per session.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rbac.application.interfaces.services import ICacheService
from rbac.application.services import (
    AssignmentService,
    AuthorizationService,
    PermissionResolver,
    RoleService,
    SystemRoleInitializer,
)
from rbac.core.config import Settings, get_settings
from rbac.infrastructure.persistence.database import get_session_factory
from rbac.infrastructure.persistence.repositories import (
    RoleRepository,
    UserRoleRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RbacServices:
    """Services sharing one session (and therefore one transaction)."""

    roles: RoleService
    assignments: AssignmentService
    resolver: PermissionResolver
    authorization: AuthorizationService
    bootstrap: SystemRoleInitializer


def build_rbac_services(
    session: AsyncSession,
    cache: ICacheService | None = None,
    settings: Settings | None = None,
    *,
    defer_invalidation: bool = False,
) -> RbacServices:
    """Build RbacServices over session.

    Without cache, permission checks hit the database on every call. With
    defer_invalidation=True the caller owns the commit and must run
    authorization.apply_pending_invalidations() after it; rbac_transaction
    does this.
    """
    settings = settings or get_settings()
    role_repo = RoleRepository(session)
    user_role_repo = UserRoleRepository(session)
    resolver = PermissionResolver(
        role_repo, user_role_repo, max_depth=settings.role_inheritance_depth
    )
    authorization = AuthorizationService(
        permission_resolver=resolver,
        cache=cache,
        cache_ttl=settings.cache_ttl_permissions,
        defer_invalidation=defer_invalidation,
    )
    return RbacServices(
        roles=RoleService(role_repo, user_role_repo, authorization),
        assignments=AssignmentService(role_repo, user_role_repo, authorization),
        resolver=resolver,
        authorization=authorization,
        bootstrap=SystemRoleInitializer(role_repo),
    )


@asynccontextmanager
async def rbac_transaction(
    cache: ICacheService | None = None,
    settings: Settings | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[RbacServices]:
    """One write transaction with cache invalidation after commit.

    Commits on success and then clears the cache keys the writes touched.
    On exception the transaction rolls back and queued invalidations are
    dropped.
    """
    factory = session_factory or get_session_factory()
    async with factory() as session:
        services = build_rbac_services(
            session, cache, settings, defer_invalidation=True
        )
        try:
            async with session.begin():
                yield services
        except BaseException:
            services.authorization.discard_pending_invalidations()
            raise
    if services.authorization.has_pending_invalidations():
        logger.debug("Applying permission cache invalidations after commit")
    await services.authorization.apply_pending_invalidations()
