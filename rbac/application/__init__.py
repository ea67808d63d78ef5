"""Application layer: interfaces, DTOs, services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, cache).
"""

from rbac.application.interfaces import (
    ICacheService,
    IPermissionResolver,
    IRoleRepository,
    IUserRoleRepository,
)
from rbac.application.services import (
    AssignmentService,
    AuthorizationService,
    PermissionResolver,
    RoleService,
    SystemRoleInitializer,
)

__all__ = [
    "AssignmentService",
    "AuthorizationService",
    "ICacheService",
    "IPermissionResolver",
    "IRoleRepository",
    "IUserRoleRepository",
    "PermissionResolver",
    "RoleService",
    "SystemRoleInitializer",
]
