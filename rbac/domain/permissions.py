"""Permission catalog: the closed set of permission ids and system role defaults.

Pure data. PERMISSIONS is the only source of valid permission strings;
ROLE_PERMISSIONS is consulted only when seeding system roles.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import TypedDict

from rbac.domain.exceptions import UnknownSystemRoleException

# (code, description). Codes are resource:action.
PERMISSION_DEFINITIONS: tuple[tuple[str, str], ...] = (
    ("leads:create", "Create leads"),
    ("leads:read", "View leads"),
    ("leads:update", "Update leads"),
    ("leads:delete", "Delete leads"),
    ("leads:assign", "Assign leads to agents"),
    ("leads:import", "Import leads from files"),
    ("leads:export", "Export leads"),
    ("buyers:create", "Create buyers"),
    ("buyers:read", "View buyers"),
    ("buyers:update", "Update buyers"),
    ("buyers:delete", "Delete buyers"),
    ("communications:read", "View communication history"),
    ("communications:send", "Send email and SMS"),
    ("campaigns:read", "View campaigns"),
    ("campaigns:write", "Create and edit campaigns"),
    ("time:create", "Log time entries"),
    ("time:read", "View time entries"),
    ("time:update", "Edit time entries"),
    ("time:approve", "Approve timesheets"),
    ("analytics:read", "View dashboards and metrics"),
    ("analytics:export", "Export analytics data"),
    ("reports:read", "View reports"),
    ("reports:export", "Export reports"),
    ("users:create", "Create users"),
    ("users:read", "View users"),
    ("users:update", "Update users"),
    ("users:delete", "Delete users"),
    ("roles:create", "Create roles"),
    ("roles:read", "View roles"),
    ("roles:update", "Update roles"),
    ("roles:delete", "Delete roles"),
    ("roles:assign", "Assign and revoke roles"),
    ("tenants:create", "Create tenants"),
    ("tenants:read", "View tenants"),
    ("tenants:update", "Update tenants"),
    ("tenants:delete", "Delete tenants"),
    ("settings:read", "View tenant settings"),
    ("settings:write", "Change tenant settings"),
    ("integrations:read", "View integrations"),
    ("integrations:manage", "Configure integrations"),
    ("audit:read", "View audit log"),
    ("system:settings", "Change system-wide settings"),
    ("system:admin", "System administration"),
)

PERMISSIONS: frozenset[str] = frozenset(code for code, _ in PERMISSION_DEFINITIONS)


class SystemRole(str, Enum):
    """Built-in role names seeded at bootstrap, in seeding order."""

    SUPER_ADMIN = "super_admin"
    TENANT_ADMIN = "tenant_admin"
    MANAGER = "manager"
    AGENT = "agent"
    VIEWER = "viewer"


class SystemRoleDefinition(TypedDict):
    """Presentation fields for a system role."""

    display_name: str
    description: str


SYSTEM_ROLE_DEFINITIONS: Mapping[SystemRole, SystemRoleDefinition] = MappingProxyType(
    {
        SystemRole.SUPER_ADMIN: {
            "display_name": "Super Administrator",
            "description": "Full system access with all permissions",
        },
        SystemRole.TENANT_ADMIN: {
            "display_name": "Tenant Administrator",
            "description": "Tenant-level administrator with full tenant access",
        },
        SystemRole.MANAGER: {
            "display_name": "Manager",
            "description": "Team manager with lead and user management capabilities",
        },
        SystemRole.AGENT: {
            "display_name": "Agent",
            "description": "Standard agent with lead and buyer access",
        },
        SystemRole.VIEWER: {
            "display_name": "Viewer",
            "description": "Read-only access to leads and analytics",
        },
    }
)

_TENANT_ADMIN_EXCLUDED = frozenset(
    {
        "tenants:create",
        "tenants:delete",
        "system:settings",
        "system:admin",
    }
)

ROLE_PERMISSIONS: Mapping[SystemRole, frozenset[str]] = MappingProxyType(
    {
        SystemRole.SUPER_ADMIN: PERMISSIONS,
        SystemRole.TENANT_ADMIN: PERMISSIONS - _TENANT_ADMIN_EXCLUDED,
        SystemRole.MANAGER: frozenset(
            {
                "leads:create",
                "leads:read",
                "leads:update",
                "leads:delete",
                "leads:assign",
                "leads:import",
                "leads:export",
                "buyers:create",
                "buyers:read",
                "buyers:update",
                "communications:read",
                "communications:send",
                "campaigns:read",
                "campaigns:write",
                "time:create",
                "time:read",
                "time:update",
                "time:approve",
                "analytics:read",
                "analytics:export",
                "reports:read",
                "reports:export",
                "users:read",
                "users:create",
                "users:update",
                "roles:read",
                "roles:assign",
            }
        ),
        SystemRole.AGENT: frozenset(
            {
                "leads:create",
                "leads:read",
                "leads:update",
                "buyers:create",
                "buyers:read",
                "buyers:update",
                "communications:read",
                "communications:send",
                "campaigns:read",
                "time:create",
                "time:read",
                "time:update",
            }
        ),
        SystemRole.VIEWER: frozenset(
            {
                "leads:read",
                "buyers:read",
                "analytics:read",
                "reports:read",
            }
        ),
    }
)


def is_valid_permission(permission: str) -> bool:
    """Return True if permission is in the catalog."""
    return permission in PERMISSIONS


def invalid_permissions(permissions: Iterable[str]) -> list[str]:
    """Return every entry not in the catalog, in input order, without duplicates."""
    seen: set[str] = set()
    invalid: list[str] = []
    for permission in permissions:
        if permission in PERMISSIONS or permission in seen:
            continue
        seen.add(permission)
        invalid.append(permission)
    return invalid


def default_permissions_for(name: str) -> frozenset[str]:
    """Return the seeded permission set for a system role name.

    Raises:
        UnknownSystemRoleException: If name is not a SystemRole value.
    """
    try:
        role = SystemRole(name)
    except ValueError:
        raise UnknownSystemRoleException(name) from None
    return ROLE_PERMISSIONS[role]
