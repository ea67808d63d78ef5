"""ORM models. Importing this package registers every table on Base.metadata."""

from rbac.infrastructure.persistence.models.role import Role
from rbac.infrastructure.persistence.models.user_role import UserRole

__all__ = ["Role", "UserRole"]
