"""Application DTOs (no ORM dependency)."""

from rbac.application.dtos.role import (
    RoleCreate,
    RoleResult,
    RoleSearch,
    RoleSearchResult,
    RoleUpdate,
)
from rbac.application.dtos.user_role import AssignRoleOptions, UserRoleResult

__all__ = [
    "AssignRoleOptions",
    "RoleCreate",
    "RoleResult",
    "RoleSearch",
    "RoleSearchResult",
    "RoleUpdate",
    "UserRoleResult",
]
