"""DTOs for role use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from rbac.core.constants import DEFAULT_SEARCH_LIMIT
from rbac.domain.enums import RoleKind, SortOrder


@dataclass(frozen=True)
class RoleResult:
    """Role read-model (result of get_by_id, get_by_name_and_scope, create_role, etc.)."""

    id: str
    name: str
    tenant_id: str | None
    kind: RoleKind
    permissions: frozenset[str]
    inherited_roles: frozenset[str]
    is_active: bool
    display_name: str | None = None
    description: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_system(self) -> bool:
        return self.kind == RoleKind.SYSTEM


@dataclass(frozen=True)
class RoleCreate:
    """Input for creating a custom role. Kind is not accepted: only bootstrap writes system roles."""

    name: str
    display_name: str | None = None
    description: str | None = None
    permissions: list[str] = field(default_factory=list)
    inherited_roles: list[str] = field(default_factory=list)
    is_active: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RoleUpdate:
    """Partial update for a role. None means "leave unchanged"; name and kind are not patchable."""

    display_name: str | None = None
    description: str | None = None
    permissions: list[str] | None = None
    inherited_roles: list[str] | None = None
    is_active: bool | None = None
    metadata: dict[str, Any] | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the fields set on this patch."""
        values = {
            "display_name": self.display_name,
            "description": self.description,
            "permissions": self.permissions,
            "inherited_roles": self.inherited_roles,
            "is_active": self.is_active,
            "metadata": self.metadata,
        }
        return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class RoleSearch:
    """Criteria for role search within one tenant scope."""

    search: str | None = None
    kind: RoleKind | None = None
    is_active: bool | None = None
    offset: int = 0
    limit: int = DEFAULT_SEARCH_LIMIT
    sort_by: str = "created_at"
    sort_order: SortOrder = SortOrder.DESC


@dataclass(frozen=True)
class RoleSearchResult:
    """One page of roles plus the total match count (independent of paging)."""

    roles: list[RoleResult]
    total: int
