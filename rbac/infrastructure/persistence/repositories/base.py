"""Base repository: generic entity access, savepoint-guarded create, update, delete."""

from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac.infrastructure.persistence.database import Base


def scope_clause(column: Any, tenant_id: str | None) -> ColumnElement[bool]:
    """Match one scope exactly: IS NULL for global, equality otherwise."""
    if tenant_id is None:
        return column.is_(None)
    return column == tenant_id


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_entity_by_id, create, update, delete.

    create() inserts inside a SAVEPOINT so a unique-index conflict rolls back
    only the insert; the IntegrityError propagates for the subclass to
    translate into a domain exception.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_entity_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single ORM record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record (raises IntegrityError on constraint conflict)."""
        async with self.db.begin_nested():
            self.db.add(obj)
            await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush pending changes on an attached record and reload server-side columns."""
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
