"""Resolves a user's effective permissions from grants and role inheritance (implements IPermissionResolver)."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rbac.application.dtos.role import RoleResult
from rbac.application.interfaces.repositories import (
    IRoleRepository,
    IUserRoleRepository,
)
from rbac.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Union of direct permissions of assigned roles and of the roles they inherit.

    Inherited roles are referenced by name and looked up in the scope being
    resolved, requiring is_active. Names with no active role are skipped,
    so resolution never fails on a dangling reference.

    max_depth controls how far inherited_roles are followed. With the
    default of 1 only names listed on an assigned role are expanded; their
    own inherited_roles are not. Larger values walk breadth-first and stop
    at roles already visited, so cyclic graphs terminate. 0 disables
    inheritance.

    No caching: every call reads current store state. Wrap with
    AuthorizationService for a cached view.
    """

    def __init__(
        self,
        role_repo: IRoleRepository,
        user_role_repo: IUserRoleRepository,
        *,
        max_depth: int = 1,
    ) -> None:
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self._role_repo = role_repo
        self._user_role_repo = user_role_repo
        self.max_depth = max_depth

    async def get_user_permissions(
        self, user_id: str, tenant_id: str | None = None
    ) -> set[str]:
        """Return the effective permission set for user in scope (no role attribution)."""
        roles = await self._user_role_repo.get_roles_for_user(
            user_id, tenant_id, utc_now()
        )
        permissions: set[str] = set()
        for role in roles:
            permissions.update(role.permissions)

        visited = {role.id for role in roles}
        frontier: list[RoleResult] = list(roles)
        for _ in range(self.max_depth):
            names = {name for role in frontier for name in role.inherited_roles}
            if not names:
                break
            inherited = await self._role_repo.get_active_by_names(names, tenant_id)
            self._log_dangling(names, inherited, tenant_id)
            next_frontier: list[RoleResult] = []
            for role in inherited:
                permissions.update(role.permissions)
                if role.id not in visited:
                    visited.add(role.id)
                    next_frontier.append(role)
            frontier = next_frontier
        return permissions

    async def has_permission(
        self, user_id: str, permission: str, tenant_id: str | None = None
    ) -> bool:
        """Return True if permission is in the user's effective set."""
        return permission in await self.get_user_permissions(user_id, tenant_id)

    async def has_any_permission(
        self, user_id: str, permissions: Iterable[str], tenant_id: str | None = None
    ) -> bool:
        """Return True if at least one of permissions is held (False for an empty list)."""
        wanted = set(permissions)
        if not wanted:
            return False
        return not wanted.isdisjoint(await self.get_user_permissions(user_id, tenant_id))

    async def has_all_permissions(
        self, user_id: str, permissions: Iterable[str], tenant_id: str | None = None
    ) -> bool:
        """Return True if every one of permissions is held (True for an empty list)."""
        wanted = set(permissions)
        if not wanted:
            return True
        return wanted <= await self.get_user_permissions(user_id, tenant_id)

    @staticmethod
    def _log_dangling(
        names: set[str], found: list[RoleResult], tenant_id: str | None
    ) -> None:
        missing = names - {role.name for role in found}
        if missing:
            logger.debug(
                "Skipping inherited roles with no active match: names=%s tenant_id=%s",
                sorted(missing),
                tenant_id,
            )
