"""UserRole repository: grants of roles to users (single entity responsibility)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac.application.dtos.role import RoleResult
from rbac.application.dtos.user_role import UserRoleResult
from rbac.domain.exceptions import DuplicateAssignmentException
from rbac.infrastructure.persistence.models.role import Role
from rbac.infrastructure.persistence.models.user_role import UserRole
from rbac.infrastructure.persistence.repositories.base import (
    BaseRepository,
    scope_clause,
)
from rbac.infrastructure.persistence.repositories.role_repo import _role_to_result
from rbac.shared.utils.datetime import ensure_utc


def _user_role_to_result(ur: UserRole) -> UserRoleResult:
    """Map ORM UserRole to application UserRoleResult."""
    return UserRoleResult(
        id=ur.id,
        user_id=ur.user_id,
        role_id=ur.role_id,
        tenant_id=ur.tenant_id,
        is_active=ur.is_active,
        assigned_at=ensure_utc(ur.assigned_at),
        assigned_by=ur.assigned_by,
        expires_at=ensure_utc(ur.expires_at),
        revoked_at=ensure_utc(ur.revoked_at),
        revoked_by=ur.revoked_by,
        reason=ur.reason,
        metadata=dict(ur.extra_metadata or {}),
    )


class UserRoleRepository(BaseRepository[UserRole]):
    """Grant store. Single active grant per (user, role, scope) is enforced by uq_user_role_active."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, UserRole)

    def _active_in_scope(self, user_id: str, tenant_id: str | None) -> list[Any]:
        return [
            UserRole.user_id == user_id,
            scope_clause(UserRole.tenant_id, tenant_id),
            UserRole.is_active.is_(True),
        ]

    @staticmethod
    def _unexpired(now: datetime) -> Any:
        return or_(UserRole.expires_at.is_(None), UserRole.expires_at > now)

    async def get_active(
        self, user_id: str, role_id: str, tenant_id: str | None
    ) -> UserRoleResult | None:
        result = await self.db.execute(
            select(UserRole).where(
                *self._active_in_scope(user_id, tenant_id),
                UserRole.role_id == role_id,
            )
        )
        row = result.scalars().first()
        return _user_role_to_result(row) if row else None

    async def get_active_by_user(
        self, user_id: str, tenant_id: str | None, now: datetime
    ) -> list[UserRoleResult]:
        result = await self.db.execute(
            select(UserRole)
            .where(*self._active_in_scope(user_id, tenant_id), self._unexpired(now))
            .order_by(UserRole.assigned_at.asc(), UserRole.id.asc())
        )
        return [_user_role_to_result(ur) for ur in result.scalars().all()]

    async def get_roles_for_user(
        self, user_id: str, tenant_id: str | None, now: datetime
    ) -> list[RoleResult]:
        """Roles behind the user's live grants; grants to deleted roles drop out of the join."""
        result = await self.db.execute(
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(*self._active_in_scope(user_id, tenant_id), self._unexpired(now))
            .order_by(UserRole.assigned_at.asc(), UserRole.id.asc())
        )
        return [_role_to_result(r) for r in result.scalars().all()]

    async def list_by_user(
        self, user_id: str, tenant_id: str | None, *, include_revoked: bool = False
    ) -> list[UserRoleResult]:
        conditions = [
            UserRole.user_id == user_id,
            scope_clause(UserRole.tenant_id, tenant_id),
        ]
        if not include_revoked:
            conditions.append(UserRole.is_active.is_(True))
        result = await self.db.execute(
            select(UserRole)
            .where(*conditions)
            .order_by(UserRole.assigned_at.desc(), UserRole.id.desc())
        )
        return [_user_role_to_result(ur) for ur in result.scalars().all()]

    async def count_active_by_role(self, role_id: str) -> int:
        total = await self.db.scalar(
            select(func.count())
            .select_from(UserRole)
            .where(UserRole.role_id == role_id, UserRole.is_active.is_(True))
        )
        return int(total or 0)

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
        """Insert an active grant; DuplicateAssignmentException if one already exists."""
        ur = UserRole(
            user_id=user_id,
            role_id=role_id,
            tenant_id=tenant_id,
            is_active=True,
            assigned_at=assigned_at,
            assigned_by=assigned_by,
            expires_at=expires_at,
            reason=reason,
            extra_metadata=dict(metadata or {}),
        )
        try:
            created = await self.create(ur)
        except IntegrityError:
            raise DuplicateAssignmentException(user_id, role_id, tenant_id) from None
        return _user_role_to_result(created)

    async def revoke(
        self,
        assignment_id: str,
        *,
        revoked_at: datetime,
        revoked_by: str | None = None,
        reason: str | None = None,
    ) -> UserRoleResult | None:
        ur = await self.get_entity_by_id(assignment_id)
        if ur is None:
            return None
        ur.is_active = False
        ur.revoked_at = revoked_at
        ur.revoked_by = revoked_by
        ur.reason = reason
        updated = await self.update(ur)
        return _user_role_to_result(updated)
