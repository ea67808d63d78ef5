"""Seeds the built-in global system roles (idempotent)."""

from __future__ import annotations

import logging

from rbac.application.dtos.role import RoleResult
from rbac.application.interfaces.repositories import IRoleRepository
from rbac.domain.enums import RoleKind
from rbac.domain.exceptions import DuplicateRoleNameException
from rbac.domain.permissions import (
    SYSTEM_ROLE_DEFINITIONS,
    SystemRole,
    default_permissions_for,
)

logger = logging.getLogger(__name__)


class SystemRoleInitializer:
    """Creates each SystemRole in the global scope if no role with that name exists there."""

    def __init__(self, role_repo: IRoleRepository) -> None:
        self._role_repo = role_repo

    async def initialize_system_roles(self) -> list[RoleResult]:
        """Create missing system roles; return only those created by this call.

        A second run creates nothing. Each role is an independent
        check-then-create; if a concurrent run inserts the same role first,
        the unique-index conflict counts as "already exists".
        """
        created: list[RoleResult] = []
        for system_role in SystemRole:
            role = await self._ensure_role(system_role)
            if role is not None:
                created.append(role)
        if created:
            logger.info(
                "System roles seeded: %s", ", ".join(role.name for role in created)
            )
        return created

    async def _ensure_role(self, system_role: SystemRole) -> RoleResult | None:
        name = system_role.value
        if await self._role_repo.get_by_name_and_scope(name, None):
            return None
        definition = SYSTEM_ROLE_DEFINITIONS[system_role]
        try:
            return await self._role_repo.create_role(
                name=name,
                tenant_id=None,
                kind=RoleKind.SYSTEM,
                display_name=definition["display_name"],
                description=definition["description"],
                permissions=default_permissions_for(name),
                inherited_roles=(),
                is_active=True,
            )
        except DuplicateRoleNameException:
            logger.debug("System role %s created concurrently; skipping", name)
            return None
