"""Application services: roles, assignments, permission resolution, authorization, bootstrap."""

from rbac.application.services.assignment_service import AssignmentService
from rbac.application.services.authorization_service import (
    AuthorizationService,
    permission_cache_key,
    permission_scope_pattern,
)
from rbac.application.services.permission_resolver import PermissionResolver
from rbac.application.services.role_service import RoleService
from rbac.application.services.system_role_initializer import SystemRoleInitializer

__all__ = [
    "AssignmentService",
    "AuthorizationService",
    "PermissionResolver",
    "RoleService",
    "SystemRoleInitializer",
    "permission_cache_key",
    "permission_scope_pattern",
]
