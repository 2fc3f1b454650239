"""Generic async repository with soft-delete support."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rgaa_audit.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic repository.

    Soft-deletes: rows with `deleted_at IS NOT NULL` are excluded from all
    standard reads.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        """Return a SELECT excluding soft-deleted rows."""
        q = select(self.model)
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    async def _first(self, *criteria: Any) -> ModelT | None:
        result = await self._session.execute(self._base_query().where(*criteria))
        return result.scalars().first()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def add(self, instance: ModelT) -> ModelT:
        self._session.add(instance)
        await self._session.flush()  # surface constraint errors now
        return instance

    async def delete(self, instance: ModelT) -> None:
        await self._session.delete(instance)
        await self._session.flush()

    async def soft_delete(self, *criteria: Any) -> bool:
        """Flag matching live rows as deleted. Returns False when nothing matched."""
        result = await self._session.execute(
            update(self.model)
            .where(*criteria)
            .where(self.model.deleted_at.is_(None))
            .values(deleted_at=datetime.now(timezone.utc))
        )
        await self._session.flush()
        return result.rowcount > 0
