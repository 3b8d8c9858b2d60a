"""Generic single-model DAO keyed by a UUID ``id`` column."""

import uuid
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from depwatch.core.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseDAO(Generic[ModelT]):
    """Subclasses set ``model``. Methods flush but never commit."""

    model: type[ModelT]
    # Columns owned by the database.
    read_only: ClassVar[frozenset[str]] = frozenset({"id", "created_at", "updated_at"})

    def _check_writable(self, values: dict[str, Any]) -> None:
        columns = self.model.__mapper__.column_attrs.keys()
        for key in values:
            if key in self.read_only:
                raise AttributeError(f"'{key}' is immutable and cannot be updated")
            if key not in columns:
                raise AttributeError(f"{self.model.__name__} has no column '{key}'")

    async def get_by_id(self, session: AsyncSession, pk: uuid.UUID) -> ModelT | None:
        if pk is None:
            raise ValueError("pk must not be None")
        return await session.get(self.model, pk)

    async def create(self, session: AsyncSession, **values: Any) -> ModelT:
        """Insert a row and reload it so server defaults (id, timestamps) are set."""
        obj = self.model(**values)
        session.add(obj)
        await session.flush()
        await session.refresh(obj)
        return obj

    async def update(self, session: AsyncSession, pk: uuid.UUID, **values: Any) -> ModelT | None:
        """Set *values* on the row, or return None if it does not exist."""
        self._check_writable(values)
        obj = await self.get_by_id(session, pk)
        if obj is None:
            return None
        for key, val in values.items():
            setattr(obj, key, val)
        await session.flush()
        await session.refresh(obj)
        return obj

    async def delete(self, session: AsyncSession, pk: uuid.UUID) -> bool:
        """Delete by primary key. Returns False when no row matched."""
        if pk is None:
            raise ValueError("pk must not be None")
        result = await session.execute(delete(self.model).where(self.model.id == pk))
        return result.rowcount > 0
