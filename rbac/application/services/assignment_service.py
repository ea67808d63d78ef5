"""Assignment application service: grant and revoke roles for users."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rbac.application.dtos.role import RoleResult
from rbac.application.dtos.user_role import AssignRoleOptions, UserRoleResult
from rbac.application.interfaces.repositories import (
    IRoleRepository,
    IUserRoleRepository,
)
from rbac.domain.exceptions import (
    AssignmentNotFoundException,
    DuplicateAssignmentException,
    InactiveRoleAssignmentException,
    RoleNotFoundException,
)
from rbac.shared.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from rbac.application.services.authorization_service import AuthorizationService

logger = logging.getLogger(__name__)


class AssignmentService:
    """Assignment Manager. Grants are soft-deleted on revoke and never removed."""

    def __init__(
        self,
        role_repo: IRoleRepository,
        user_role_repo: IUserRoleRepository,
        authorization_service: AuthorizationService | None = None,
    ) -> None:
        self._role_repo = role_repo
        self._user_role_repo = user_role_repo
        self._authorization = authorization_service

    async def assign_role_to_user(
        self,
        user_id: str,
        role_id: str,
        tenant_id: str | None = None,
        actor_id: str | None = None,
        options: AssignRoleOptions | None = None,
    ) -> UserRoleResult:
        """Grant role to user in scope.

        An is_active grant blocks a new one even when it has expired; callers
        revoke first, then reassign. The duplicate check is read-then-write;
        the repository raises DuplicateAssignmentException if a concurrent
        grant wins the store's unique index.

        Raises:
            RoleNotFoundException: If role does not exist.
            InactiveRoleAssignmentException: If role is inactive.
            DuplicateAssignmentException: If an active grant already exists.
        """
        opts = options or AssignRoleOptions()
        role = await self._role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundException(role_id)
        if not role.is_active:
            raise InactiveRoleAssignmentException(role_id)

        existing = await self._user_role_repo.get_active(user_id, role_id, tenant_id)
        if existing:
            raise DuplicateAssignmentException(user_id, role_id, tenant_id)

        grant = await self._user_role_repo.create_assignment(
            user_id=user_id,
            role_id=role_id,
            tenant_id=tenant_id,
            assigned_at=utc_now(),
            assigned_by=actor_id,
            expires_at=ensure_utc(opts.expires_at),
            reason=opts.reason,
            metadata=opts.metadata,
        )
        logger.info(
            "Role assigned: role_id=%s user_id=%s tenant_id=%s expires_at=%s by=%s",
            role_id,
            user_id,
            tenant_id,
            grant.expires_at,
            actor_id,
        )
        if self._authorization:
            await self._authorization.invalidate_user_cache(user_id, tenant_id)
        return grant

    async def revoke_role_from_user(
        self,
        user_id: str,
        role_id: str,
        tenant_id: str | None = None,
        actor_id: str | None = None,
        reason: str | None = None,
    ) -> UserRoleResult:
        """Soft-close the active grant for (user, role, scope); the record is kept.

        Raises:
            AssignmentNotFoundException: If no active grant exists.
        """
        grant = await self._user_role_repo.get_active(user_id, role_id, tenant_id)
        if grant is None:
            raise AssignmentNotFoundException(user_id, role_id, tenant_id)

        revoked = await self._user_role_repo.revoke(
            grant.id,
            revoked_at=utc_now(),
            revoked_by=actor_id,
            reason=reason,
        )
        if revoked is None:
            raise AssignmentNotFoundException(user_id, role_id, tenant_id)
        logger.info(
            "Role revoked: role_id=%s user_id=%s tenant_id=%s by=%s",
            role_id,
            user_id,
            tenant_id,
            actor_id,
        )
        if self._authorization:
            await self._authorization.invalidate_user_cache(user_id, tenant_id)
        return revoked

    async def get_user_roles(
        self, user_id: str, tenant_id: str | None = None
    ) -> list[RoleResult]:
        """Return roles of the user's active, unexpired grants in scope (order unspecified)."""
        return await self._user_role_repo.get_roles_for_user(
            user_id, tenant_id, utc_now()
        )

    async def list_user_assignments(
        self,
        user_id: str,
        tenant_id: str | None = None,
        *,
        include_revoked: bool = False,
    ) -> list[UserRoleResult]:
        """Return the user's grants in scope, newest first; use state_at() for expiry."""
        return await self._user_role_repo.list_by_user(
            user_id, tenant_id, include_revoked=include_revoked
        )
