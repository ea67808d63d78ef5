"""Role repository. Read methods return RoleResult (DTO); the ORM entity never leaves this module."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac.application.dtos.role import RoleResult, RoleSearch
from rbac.domain.enums import RoleKind, SortOrder
from rbac.domain.exceptions import DuplicateRoleNameException
from rbac.infrastructure.persistence.models.role import Role
from rbac.infrastructure.persistence.repositories.base import (
    BaseRepository,
    scope_clause,
)
from rbac.shared.utils.datetime import ensure_utc

_LIST_FIELDS = frozenset({"permissions", "inherited_roles"})


def _normalize(values: Iterable[str]) -> list[str]:
    """Sorted, de-duplicated list for JSON storage."""
    return sorted(set(values))


def _role_to_result(r: Role) -> RoleResult:
    """Map ORM Role to application RoleResult."""
    return RoleResult(
        id=r.id,
        name=r.name,
        tenant_id=r.tenant_id,
        kind=RoleKind(r.kind),
        permissions=frozenset(r.permissions or ()),
        inherited_roles=frozenset(r.inherited_roles or ()),
        is_active=r.is_active,
        display_name=r.display_name,
        description=r.description,
        metadata=dict(r.extra_metadata or {}),
        created_by=r.created_by,
        updated_by=r.updated_by,
        created_at=ensure_utc(r.created_at),
        updated_at=ensure_utc(r.updated_at),
    )


class RoleRepository(BaseRepository[Role]):
    """Role store. Name uniqueness per scope is enforced by the uq_role_scope_name index."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        row = await self.get_entity_by_id(role_id)
        return _role_to_result(row) if row else None

    async def get_by_name_and_scope(
        self, name: str, tenant_id: str | None
    ) -> RoleResult | None:
        result = await self.db.execute(
            select(Role).where(Role.name == name, scope_clause(Role.tenant_id, tenant_id))
        )
        row = result.scalar_one_or_none()
        return _role_to_result(row) if row else None

    async def get_active_by_names(
        self, names: Collection[str], tenant_id: str | None
    ) -> list[RoleResult]:
        """Active roles named in names, one query; missing names are simply absent."""
        if not names:
            return []
        result = await self.db.execute(
            select(Role).where(
                Role.name.in_(list(set(names))),
                scope_clause(Role.tenant_id, tenant_id),
                Role.is_active.is_(True),
            )
        )
        return [_role_to_result(r) for r in result.scalars().all()]

    async def search(
        self, criteria: RoleSearch, tenant_id: str | None
    ) -> tuple[list[RoleResult], int]:
        """Case-insensitive substring search over name, display_name and description."""
        conditions = [scope_clause(Role.tenant_id, tenant_id)]
        if criteria.search:
            term = criteria.search.strip()
            conditions.append(
                or_(
                    Role.name.icontains(term, autoescape=True),
                    Role.display_name.icontains(term, autoescape=True),
                    Role.description.icontains(term, autoescape=True),
                )
            )
        if criteria.kind is not None:
            conditions.append(Role.kind == RoleKind(criteria.kind).value)
        if criteria.is_active is not None:
            conditions.append(Role.is_active.is_(criteria.is_active))

        total = await self.db.scalar(
            select(func.count()).select_from(Role).where(*conditions)
        )

        sort_column = getattr(Role, criteria.sort_by)
        if criteria.sort_order == SortOrder.ASC:
            order = (sort_column.asc(), Role.id.asc())
        else:
            order = (sort_column.desc(), Role.id.desc())
        result = await self.db.execute(
            select(Role)
            .where(*conditions)
            .order_by(*order)
            .offset(criteria.offset)
            .limit(criteria.limit)
        )
        return [_role_to_result(r) for r in result.scalars().all()], int(total or 0)

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
        """Insert role; DuplicateRoleNameException if the scope already holds name."""
        role = Role(
            name=name,
            tenant_id=tenant_id,
            kind=RoleKind(kind).value,
            display_name=display_name,
            description=description,
            permissions=_normalize(permissions),
            inherited_roles=_normalize(inherited_roles),
            is_active=is_active,
            extra_metadata=dict(metadata or {}),
            created_by=created_by,
            updated_by=created_by,
        )
        try:
            created = await self.create(role)
        except IntegrityError:
            raise DuplicateRoleNameException(name, tenant_id) from None
        return _role_to_result(created)

    async def update_role(
        self, role_id: str, changes: dict[str, Any], updated_by: str | None = None
    ) -> RoleResult | None:
        role = await self.get_entity_by_id(role_id)
        if role is None:
            return None
        for key, value in changes.items():
            if key in _LIST_FIELDS:
                value = _normalize(value)
            elif key == "metadata":
                key, value = "extra_metadata", dict(value)
            setattr(role, key, value)
        role.updated_by = updated_by
        updated = await self.update(role)
        return _role_to_result(updated)

    async def delete_role(self, role_id: str) -> bool:
        role = await self.get_entity_by_id(role_id)
        if role is None:
            return False
        await self.delete(role)
        return True
