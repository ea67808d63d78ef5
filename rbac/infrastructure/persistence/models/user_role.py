"""UserRole ORM model: a grant of a role to a user in a scope."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func, literal_column

from rbac.infrastructure.persistence.database import Base
from rbac.infrastructure.persistence.models.mixins import ScopedModel


class UserRole(ScopedModel, Base):
    """Grant. Table: user_role. Never hard-deleted; revoke sets is_active False.

    role_id has no foreign key: revoked grants outlive a deleted role as history.
    """

    __tablename__ = "user_role"

    user_id: Mapped[str] = mapped_column(String, nullable=False)
    role_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    assigned_by: Mapped[str | None] = mapped_column(String, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    revoked_by: Mapped[str | None] = mapped_column(String, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_user_role_lookup", "user_id", "tenant_id"),)


# At most one active grant per (user, role, scope); revoked rows are unconstrained.
Index(
    "uq_user_role_active",
    UserRole.user_id,
    UserRole.role_id,
    func.coalesce(UserRole.tenant_id, literal_column("''")),
    unique=True,
    postgresql_where=UserRole.is_active == true(),
    sqlite_where=UserRole.is_active == true(),
)
