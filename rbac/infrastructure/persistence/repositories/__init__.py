"""Persistence repositories. Re-exports for dependency injection."""

from rbac.infrastructure.persistence.repositories.base import BaseRepository
from rbac.infrastructure.persistence.repositories.role_repo import RoleRepository
from rbac.infrastructure.persistence.repositories.user_role_repo import (
    UserRoleRepository,
)

__all__ = [
    "BaseRepository",
    "RoleRepository",
    "UserRoleRepository",
]
