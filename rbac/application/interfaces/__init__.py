"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from rbac.infrastructure.
"""

from rbac.application.interfaces.repositories import (
    IRoleRepository,
    IUserRoleRepository,
)
from rbac.application.interfaces.services import ICacheService, IPermissionResolver

__all__ = [
    "ICacheService",
    "IPermissionResolver",
    "IRoleRepository",
    "IUserRoleRepository",
]
