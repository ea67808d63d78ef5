"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.

Neither store is assumed to provide cross-record atomicity. Implementations
must enforce role-name uniqueness per scope and single active grant per
(user, role, scope) at the storage level and raise the matching domain
exception when an insert loses that race.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from rbac.domain.enums import RoleKind

if TYPE_CHECKING:
    from rbac.application.dtos.role import RoleResult, RoleSearch
    from rbac.application.dtos.user_role import UserRoleResult


class IRoleRepository(Protocol):
    """Protocol for the role store (DIP)."""

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        """Return role by ID."""

    async def get_by_name_and_scope(
        self, name: str, tenant_id: str | None
    ) -> RoleResult | None:
        """Return role by name in a scope; tenant_id None means the global scope."""

    async def get_active_by_names(
        self, names: Collection[str], tenant_id: str | None
    ) -> list[RoleResult]:
        """Return active roles whose name is in names, in one scope (batch lookup)."""

    async def search(
        self, criteria: RoleSearch, tenant_id: str | None
    ) -> tuple[list[RoleResult], int]:
        """Return (page, total matching count) for criteria within one scope."""

    async def create_role(
        self,
        *,
        name: str,
        tenant_id: str | None,
        kind: RoleKind,
        display_name: str | None = None,
        description: str | None = None,
        permissions: Collection[str] = (),
        inherited_roles: Collection[str] = (),
        is_active: bool = True,
        metadata: dict[str, Any] | None = None,
        created_by: str | None = None,
    ) -> RoleResult:
        """Insert role; raise DuplicateRoleNameException on a scope/name conflict."""

    async def update_role(
        self, role_id: str, changes: dict[str, Any], updated_by: str | None = None
    ) -> RoleResult | None:
        """Apply changes to role; return updated role or None if missing."""

    async def delete_role(self, role_id: str) -> bool:
        """Hard-delete role; return False if it did not exist."""


class IUserRoleRepository(Protocol):
    """Protocol for the user-role grant store (DIP)."""

    async def get_active(
        self, user_id: str, role_id: str, tenant_id: str | None
    ) -> UserRoleResult | None:
        """Return the is_active grant for the triple (expiry not considered)."""

    async def get_active_by_user(
        self, user_id: str, tenant_id: str | None, now: datetime
    ) -> list[UserRoleResult]:
        """Return grants that are is_active and unexpired at now."""

    async def get_roles_for_user(
        self, user_id: str, tenant_id: str | None, now: datetime
    ) -> list[RoleResult]:
        """Return roles of grants that are is_active and unexpired at now."""

    async def list_by_user(
        self, user_id: str, tenant_id: str | None, *, include_revoked: bool = False
    ) -> list[UserRoleResult]:
        """Return grant history for user in scope, newest first."""

    async def count_active_by_role(self, role_id: str) -> int:
        """Count is_active grants referencing role (expired-but-unrevoked included)."""

    async def create_assignment(
        self,
        *,
        user_id: str,
        role_id: str,
        tenant_id: str | None,
        assigned_at: datetime,
        assigned_by: str | None = None,
        expires_at: datetime | None = None,
        reason: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> UserRoleResult:
        """Insert active grant; raise DuplicateAssignmentException on conflict."""

    async def revoke(
        self,
        assignment_id: str,
        *,
        revoked_at: datetime,
        revoked_by: str | None = None,
        reason: str | None = None,
    ) -> UserRoleResult | None:
        """Soft-close grant (is_active False); return updated grant or None if missing."""
