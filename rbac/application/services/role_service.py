"""Role application service: create, update, read, search, and delete roles."""

from __future__ import annotations

import logging
from collections.abc import Collection
from typing import TYPE_CHECKING

from rbac.application.dtos.role import (
    RoleCreate,
    RoleResult,
    RoleSearch,
    RoleSearchResult,
    RoleUpdate,
)
from rbac.application.interfaces.repositories import (
    IRoleRepository,
    IUserRoleRepository,
)
from rbac.core.constants import MAX_SEARCH_LIMIT, ROLE_SORT_FIELDS
from rbac.domain.enums import RoleKind
from rbac.domain.exceptions import (
    DuplicateRoleNameException,
    InvalidPermissionException,
    RoleInUseException,
    RoleNotFoundException,
    SystemRoleImmutableException,
    UnknownInheritedRoleException,
    ValidationException,
)
from rbac.domain.permissions import invalid_permissions

if TYPE_CHECKING:
    from rbac.application.services.authorization_service import AuthorizationService

logger = logging.getLogger(__name__)


class RoleService:
    """Role Manager. Enforces name uniqueness per scope, permission validity,
    inherited-role existence, and system-role immutability.
    """

    def __init__(
        self,
        role_repo: IRoleRepository,
        user_role_repo: IUserRoleRepository,
        authorization_service: AuthorizationService | None = None,
    ) -> None:
        self._role_repo = role_repo
        self._user_role_repo = user_role_repo
        self._authorization = authorization_service

    async def create_role(
        self,
        data: RoleCreate,
        tenant_id: str | None = None,
        actor_id: str | None = None,
    ) -> RoleResult:
        """Create a custom role in the given scope (None = global).

        Checks run in order: name present, name free in scope, permissions in
        catalog, inherited roles resolvable. The name check is best-effort
        (read then write); the repository raises DuplicateRoleNameException
        if a concurrent create wins the unique index.

        Raises:
            ValidationException: If name is empty or has surrounding whitespace.
            DuplicateRoleNameException: If name is taken in scope.
            InvalidPermissionException: Listing every invalid permission.
            UnknownInheritedRoleException: For the first unresolvable inherited name.
        """
        name = data.name
        if not name or not name.strip():
            raise ValidationException("Role name is required", field="name")
        if name != name.strip():
            raise ValidationException(
                "Role name must not have leading or trailing whitespace", field="name"
            )

        existing = await self._role_repo.get_by_name_and_scope(name, tenant_id)
        if existing:
            raise DuplicateRoleNameException(name, tenant_id)

        self._validate_permissions(data.permissions)
        await self._validate_inherited_roles(data.inherited_roles, tenant_id)

        created = await self._role_repo.create_role(
            name=name,
            tenant_id=tenant_id,
            kind=RoleKind.CUSTOM,
            display_name=data.display_name,
            description=data.description,
            permissions=data.permissions,
            inherited_roles=data.inherited_roles,
            is_active=data.is_active,
            metadata=data.metadata,
            created_by=actor_id,
        )
        logger.info(
            "Role created: id=%s name=%s tenant_id=%s by=%s",
            created.id,
            created.name,
            tenant_id,
            actor_id,
        )
        return created

    async def update_role(
        self,
        role_id: str,
        patch: RoleUpdate,
        actor_id: str | None = None,
    ) -> RoleResult:
        """Apply patch to a custom role. Inherited roles resolve in the role's own scope.

        Raises:
            RoleNotFoundException: If role does not exist.
            SystemRoleImmutableException: If role is a system role.
            InvalidPermissionException: If patch.permissions has invalid entries.
            UnknownInheritedRoleException: If patch.inherited_roles has an unresolvable name.
        """
        role = await self.get_role_by_id(role_id)
        if role.is_system:
            raise SystemRoleImmutableException(role_id, "update")

        if patch.permissions is not None:
            self._validate_permissions(patch.permissions)
        if patch.inherited_roles is not None:
            await self._validate_inherited_roles(patch.inherited_roles, role.tenant_id)

        updated = await self._role_repo.update_role(
            role_id, patch.changes(), updated_by=actor_id
        )
        if updated is None:
            raise RoleNotFoundException(role_id)
        logger.info(
            "Role updated: id=%s fields=%s by=%s",
            role_id,
            sorted(patch.changes()),
            actor_id,
        )
        if self._authorization:
            await self._authorization.invalidate_for_role(role.tenant_id)
        return updated

    async def get_role_by_id(self, role_id: str) -> RoleResult:
        """Return role or raise RoleNotFoundException."""
        role = await self._role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundException(role_id)
        return role

    async def search_roles(
        self, criteria: RoleSearch, tenant_id: str | None = None
    ) -> RoleSearchResult:
        """Search roles in exactly one scope; total is counted independently of paging."""
        if criteria.sort_by not in ROLE_SORT_FIELDS:
            raise ValidationException(
                f"sort_by must be one of {', '.join(ROLE_SORT_FIELDS)}",
                field="sort_by",
            )
        if criteria.offset < 0:
            raise ValidationException("offset must be >= 0", field="offset")
        if not 1 <= criteria.limit <= MAX_SEARCH_LIMIT:
            raise ValidationException(
                f"limit must be between 1 and {MAX_SEARCH_LIMIT}", field="limit"
            )
        roles, total = await self._role_repo.search(criteria, tenant_id)
        return RoleSearchResult(roles=roles, total=total)

    async def delete_role(self, role_id: str, actor_id: str | None = None) -> None:
        """Hard-delete a custom role with no active grants.

        Grants that are is_active but past expires_at still count: they must
        be revoked before the role can be deleted.

        Raises:
            RoleNotFoundException: If role does not exist.
            SystemRoleImmutableException: If role is a system role.
            RoleInUseException: If any active grant references the role.
        """
        role = await self.get_role_by_id(role_id)
        if role.is_system:
            raise SystemRoleImmutableException(role_id, "delete")

        active = await self._user_role_repo.count_active_by_role(role_id)
        if active > 0:
            raise RoleInUseException(role_id, active)

        if not await self._role_repo.delete_role(role_id):
            raise RoleNotFoundException(role_id)
        logger.info(
            "Role deleted: id=%s name=%s tenant_id=%s by=%s",
            role_id,
            role.name,
            role.tenant_id,
            actor_id,
        )
        if self._authorization:
            await self._authorization.invalidate_for_role(role.tenant_id)

    @staticmethod
    def _validate_permissions(permissions: Collection[str]) -> None:
        invalid = invalid_permissions(permissions)
        if invalid:
            raise InvalidPermissionException(invalid)

    async def _validate_inherited_roles(
        self, names: Collection[str], tenant_id: str | None
    ) -> None:
        """Raise UnknownInheritedRoleException for the first name with no active role in scope."""
        if not names:
            return
        found = await self._role_repo.get_active_by_names(names, tenant_id)
        found_names = {role.name for role in found}
        for name in names:
            if name not in found_names:
                raise UnknownInheritedRoleException(name, tenant_id)
