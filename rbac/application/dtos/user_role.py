"""DTOs for user-role grant use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from rbac.domain.enums import GrantState
from rbac.shared.utils.datetime import is_expired


@dataclass(frozen=True)
class UserRoleResult:
    """Grant read-model. is_active is the stored flag; state_at() derives expiry."""

    id: str
    user_id: str
    role_id: str
    tenant_id: str | None
    is_active: bool
    assigned_at: datetime
    assigned_by: str | None = None
    expires_at: datetime | None = None
    revoked_at: datetime | None = None
    revoked_by: str | None = None
    reason: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def state_at(self, now: datetime | None = None) -> GrantState:
        """Return REVOKED, EXPIRED or ACTIVE for the given instant (default: now)."""
        if not self.is_active:
            return GrantState.REVOKED
        if is_expired(self.expires_at, now):
            return GrantState.EXPIRED
        return GrantState.ACTIVE

    @property
    def state(self) -> GrantState:
        return self.state_at()


@dataclass(frozen=True)
class AssignRoleOptions:
    """Optional fields for a new grant."""

    expires_at: datetime | None = None
    reason: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
