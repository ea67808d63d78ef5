"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, ScopeMixin, TimestampMixin, ActorAuditMixin, and the
combined ScopedModel.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from rbac.shared.utils.generators import ID_LENGTH, generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String(ID_LENGTH), primary_key=True, default=generate_cuid)


class ScopeMixin:
    """Mixin for tenant-scoped rows. tenant_id NULL means the global scope.

    Tenants live outside this package, so there is no foreign key.
    """

    @declared_attr
    def tenant_id(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True, index=True)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class ActorAuditMixin(TimestampMixin):
    """Mixin for created_by / updated_by. Opaque user ids, no foreign key."""

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)

    @declared_attr
    def updated_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True)


class MetadataMixin:
    """Free-form JSON column stored as "metadata" (attribute name is reserved by SQLAlchemy)."""

    @declared_attr
    def extra_metadata(cls) -> Mapped[dict[str, Any] | None]:
        return mapped_column("metadata", JSON, nullable=True)


class ScopedModel(CuidMixin, ScopeMixin, MetadataMixin):
    """Combined mixin: CUID + nullable tenant_id + metadata JSON."""

    __abstract__ = True
