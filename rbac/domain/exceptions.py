"""Domain exceptions for the RBAC core.

Defines domain-level exceptions that represent business rule violations
on roles and grants. These exceptions are independent of infrastructure
concerns; an embedding HTTP layer maps error_code to transport status codes.
"""

from typing import Any


class RbacException(Exception):
    """Base exception for all RBAC errors.

    All custom exceptions inherit from this class so callers can catch
    one type and map message, error_code, and details consistently.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. role_id, permissions).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(RbacException):
    """Raised when input validation fails (e.g. empty role name, unknown sort field)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class PermissionDeniedException(RbacException):
    """Raised by require_permission when the user lacks the permission."""

    def __init__(self, permission: str, user_id: str | None = None) -> None:
        details: dict[str, Any] = {"permission": permission}
        if user_id:
            details["user_id"] = user_id
        super().__init__(
            f"Permission denied: {permission}", "PERMISSION_DENIED", details
        )


class RoleNotFoundException(RbacException):
    """Raised when a role id does not resolve."""

    def __init__(self, role_id: str) -> None:
        """Initialize with the missing role identifier.

        Args:
            role_id: The role ID that was not found.
        """
        super().__init__(
            f"Role not found: {role_id}",
            "ROLE_NOT_FOUND",
            {"role_id": role_id},
        )


class DuplicateRoleNameException(RbacException):
    """Raised when a role name is already taken in the same tenant scope."""

    def __init__(self, name: str, tenant_id: str | None = None) -> None:
        """Initialize with the duplicate name and its scope.

        Args:
            name: The role name that already exists.
            tenant_id: Scope of the collision; None for the global scope.
        """
        super().__init__(
            f"Role with name '{name}' already exists",
            "DUPLICATE_ROLE_NAME",
            {"name": name, "tenant_id": tenant_id},
        )


class InvalidPermissionException(RbacException):
    """Raised when one or more permission ids are not in the catalog.

    details["permissions"] lists every offending entry, never the valid ones.
    """

    def __init__(self, permissions: list[str]) -> None:
        """Initialize with the invalid permission ids.

        Args:
            permissions: All invalid entries found in the request.
        """
        super().__init__(
            f"Invalid permissions: {', '.join(permissions)}",
            "INVALID_PERMISSION",
            {"permissions": list(permissions)},
        )


class UnknownInheritedRoleException(RbacException):
    """Raised when an inherited role name does not resolve to an active role in scope."""

    def __init__(self, name: str, tenant_id: str | None = None) -> None:
        super().__init__(
            f"Inherited role not found: {name}",
            "UNKNOWN_INHERITED_ROLE",
            {"name": name, "tenant_id": tenant_id},
        )


class SystemRoleImmutableException(RbacException):
    """Raised when update or delete is attempted on a system role."""

    def __init__(self, role_id: str, operation: str) -> None:
        """Initialize with role and attempted operation.

        Args:
            role_id: The system role's ID.
            operation: 'update' or 'delete'.
        """
        super().__init__(
            f"System roles cannot be modified ({operation})",
            "SYSTEM_ROLE_IMMUTABLE",
            {"role_id": role_id, "operation": operation},
        )


class RoleInUseException(RbacException):
    """Raised when deleting a role that active grants still reference."""

    def __init__(self, role_id: str, active_assignments: int) -> None:
        super().__init__(
            "Cannot delete role that is assigned to users",
            "ROLE_IN_USE",
            {"role_id": role_id, "active_assignments": active_assignments},
        )


class InactiveRoleAssignmentException(RbacException):
    """Raised when granting a role whose is_active is False."""

    def __init__(self, role_id: str) -> None:
        super().__init__(
            "Cannot assign inactive role",
            "INACTIVE_ROLE_ASSIGNMENT",
            {"role_id": role_id},
        )


class DuplicateAssignmentException(RbacException):
    """Raised when an active grant already exists for (user, role, tenant scope).

    Raised both by the service pre-check and by the repository when the
    store's partial unique index rejects a concurrent insert.
    """

    def __init__(self, user_id: str, role_id: str, tenant_id: str | None = None) -> None:
        super().__init__(
            "User already has this role assigned",
            "DUPLICATE_ASSIGNMENT",
            {"user_id": user_id, "role_id": role_id, "tenant_id": tenant_id},
        )


class AssignmentNotFoundException(RbacException):
    """Raised when revoking with no matching active grant."""

    def __init__(self, user_id: str, role_id: str, tenant_id: str | None = None) -> None:
        super().__init__(
            "Role assignment not found",
            "ASSIGNMENT_NOT_FOUND",
            {"user_id": user_id, "role_id": role_id, "tenant_id": tenant_id},
        )


class UnknownSystemRoleException(RbacException):
    """Raised when a system role name is not one of the built-in roles."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Unknown system role: {name}",
            "UNKNOWN_SYSTEM_ROLE",
            {"name": name},
        )
