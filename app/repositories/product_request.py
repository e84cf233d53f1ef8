"""Product request repository.

Offers, the selected offer and transactions are mapped with ``lazy="selectin"``,
so every read (and the refresh after create) returns fully populated requests.
"""

from __future__ import annotations

from app.core.pagination import page_offset
from app.domain.product_request import ProductRequest
from app.repositories.base import BaseRepository


class ProductRequestRepository(BaseRepository[ProductRequest]):
    model = ProductRequest

    async def find_by_id(self, pr_id: int, *, for_update: bool = False) -> ProductRequest | None:
        """Load one request; with *for_update* the row stays locked until commit."""
        q = self._base_query().where(ProductRequest.id == pr_id)
        if for_update:
            q = q.with_for_update(of=ProductRequest)
        result = await self._session.execute(q)
        return result.scalars().first()

    async def find_by_user_id(self, user_id: str) -> list[ProductRequest]:
        q = (
            self._base_query()
            .where(ProductRequest.user_id == user_id)
            .order_by(ProductRequest.created_at.desc(), ProductRequest.id.desc())
        )
        result = await self._session.execute(q)
        return list(result.scalars().all())

    async def find_paginated(self, page: int, limit: int) -> tuple[list[ProductRequest], int]:
        return await self.list(offset=page_offset(page, limit), limit=limit)
