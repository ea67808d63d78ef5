"""Role ORM model. Global (tenant_id NULL) or tenant-scoped roles."""

from sqlalchemy import JSON, Boolean, CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func, literal_column

from rbac.infrastructure.persistence.database import Base
from rbac.infrastructure.persistence.models.mixins import ActorAuditMixin, ScopedModel


class Role(ScopedModel, ActorAuditMixin, Base):
    """Role. Table: role. Unique (scope, name), where NULL tenant_id is one scope.

    permissions and inherited_roles are JSON lists stored sorted and
    de-duplicated; inherited_roles holds role names, not ids.
    """

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, default="custom")
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    inherited_roles: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("kind IN ('system', 'custom')", name="ck_role_kind"),
    )


# Expression index: a plain UniqueConstraint would let NULL tenant_id repeat.
Index(
    "uq_role_scope_name",
    func.coalesce(Role.tenant_id, literal_column("''")),
    Role.name,
    unique=True,
)
