"""Generic async repository with soft-delete filtering and pagination."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared reads and writes for one mapped model.

    Rows with `deleted_at IS NOT NULL` are excluded from every read.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    def _base_query(self) -> Select:
        """Return a SELECT excluding soft-deleted rows."""
        q = select(self.model)
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: Any) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def list(self, *, offset: int = 0, limit: int = 20) -> tuple[list[ModelT], int]:
        """Return (items, total_count), newest first."""
        q = self._base_query()

        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        # id breaks created_at ties so pages never overlap
        q = q.order_by(self.model.created_at.desc(), self.model.id.desc())
        q = q.offset(offset).limit(limit)

        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, instance: ModelT) -> ModelT:
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def update(self, instance: ModelT) -> ModelT:
        """Persist a loaded-and-mutated entity (the caller holds the read)."""
        if hasattr(instance, "updated_at"):
            instance.updated_at = datetime.now(timezone.utc)
        self._session.add(instance)
        await self._session.flush()
        return instance
