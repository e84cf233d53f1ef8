"""Interface contracts for the product-request service's collaborators.

The service only depends on these protocols; the SQLAlchemy repositories,
:class:`~app.repositories.object_store.MinioObjectStore` and
:class:`~app.services.notification.WebhookNotifier` are the production
implementations.
"""

from __future__ import annotations

from datetime import timedelta
from typing import BinaryIO, Protocol, runtime_checkable

from app.domain.offer import Offer
from app.domain.product_request import ProductRequest
from app.domain.user import User
from app.repositories.object_store import UploadInfo


@runtime_checkable
class ProductRequestStore(Protocol):
    async def create(self, instance: ProductRequest) -> ProductRequest:
        ...

    async def update(self, instance: ProductRequest) -> ProductRequest:
        ...

    async def find_by_id(self, pr_id: int, *, for_update: bool = False) -> ProductRequest | None:
        ...

    async def find_by_user_id(self, user_id: str) -> list[ProductRequest]:
        ...

    async def find_paginated(self, page: int, limit: int) -> tuple[list[ProductRequest], int]:
        """Return one page of requests plus the total row count."""
        ...


@runtime_checkable
class ObjectStore(Protocol):
    async def upload_file(
        self,
        filename: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
        folder: str,
    ) -> UploadInfo:
        ...

    async def get_signed_url(self, bucket: str, object_name: str, expires: timedelta) -> str:
        ...


@runtime_checkable
class OfferStore(Protocol):
    async def get_by_id(self, entity_id: int) -> Offer | None:
        ...


@runtime_checkable
class UserStore(Protocol):
    async def find_by_id(self, user_id: str) -> User | None:
        ...


@runtime_checkable
class Notifier(Protocol):
    async def notify_product_request(self, product_request: ProductRequest) -> None:
        """Announce a delivery-status change; raises on delivery failure."""
        ...
