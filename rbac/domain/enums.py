"""Domain enumerations for the RBAC core.

Enums represent fixed sets of domain values (role kind, grant state, sort order).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class RoleKind(_ValuesMixin, str, Enum):
    """Role origin. System roles are seeded at bootstrap and are immutable."""

    SYSTEM = "system"
    CUSTOM = "custom"


class GrantState(_ValuesMixin, str, Enum):
    """Lifecycle state of a user-role grant.

    ACTIVE and REVOKED follow the stored is_active flag. EXPIRED is derived
    at read time (is_active and expires_at in the past) and never stored.
    """

    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"


class SortOrder(_ValuesMixin, str, Enum):
    """Sort direction for role search."""

    ASC = "asc"
    DESC = "desc"
