"""Domain layer: enums, permission catalog, and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from rbac.domain.enums import GrantState, RoleKind, SortOrder
from rbac.domain.exceptions import (
    AssignmentNotFoundException,
    DuplicateAssignmentException,
    DuplicateRoleNameException,
    InactiveRoleAssignmentException,
    InvalidPermissionException,
    PermissionDeniedException,
    RbacException,
    RoleInUseException,
    RoleNotFoundException,
    SystemRoleImmutableException,
    UnknownInheritedRoleException,
    UnknownSystemRoleException,
    ValidationException,
)
from rbac.domain.permissions import (
    PERMISSIONS,
    ROLE_PERMISSIONS,
    SystemRole,
    default_permissions_for,
    invalid_permissions,
    is_valid_permission,
)

__all__ = [
    # Enums
    "GrantState",
    "RoleKind",
    "SortOrder",
    # Catalog
    "PERMISSIONS",
    "ROLE_PERMISSIONS",
    "SystemRole",
    "default_permissions_for",
    "invalid_permissions",
    "is_valid_permission",
    # Exceptions
    "AssignmentNotFoundException",
    "DuplicateAssignmentException",
    "DuplicateRoleNameException",
    "InactiveRoleAssignmentException",
    "InvalidPermissionException",
    "PermissionDeniedException",
    "RbacException",
    "RoleInUseException",
    "RoleNotFoundException",
    "SystemRoleImmutableException",
    "UnknownInheritedRoleException",
    "UnknownSystemRoleException",
    "ValidationException",
]
