"""Product request service — create, read and update buyers' requests.

Every operation awaits its collaborators one at a time and raises the first
error it meets without wrapping it. Collaborators are injected as protocols
(see :mod:`app.repositories.interfaces`).

Rule: No SQLAlchemy / no FastAPI here. Pure Python business logic.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import BinaryIO

from app.core.config import Settings
from app.core.durations import parse_duration
from app.core.exceptions import (
    ForbiddenError,
    InvalidImageReferenceError,
    NotFoundError,
    ValidationError,
)
from app.core.pagination import total_pages
from app.core.response import PaginatedResponse
from app.domain.product_request import ProductRequest
from app.repositories.interfaces import (
    Notifier,
    ObjectStore,
    OfferStore,
    ProductRequestStore,
    UserStore,
)
from app.schemas.product_request import (
    OfferOut,
    ProductRequestDetail,
    ProductRequestStatusUpdate,
    ProductRequestUpdate,
    TransactionOut,
)
from app.services.authorization import (
    can_edit_product_request,
    can_select_offer,
    can_update_delivery_status,
    ensure_offer_selected,
)

logger = logging.getLogger(__name__)

IMAGE_FOLDER = "product-request-images"
# Stored image URIs are "<bucket>/<object path>"
IMAGE_URI_MARKER = "hewpao-s3/"


@dataclass(frozen=True)
class FileHeader:
    """Metadata of one uploaded file; its bytes come from the paired reader."""

    filename: str
    size: int
    content_type: str


def image_object_path(uri: str) -> str:
    """Return the object path after the bucket marker of a stored image URI."""
    _, marker, path = uri.partition(IMAGE_URI_MARKER)
    if not marker:
        raise InvalidImageReferenceError(uri)
    return path


class ProductRequestService:
    def __init__(
        self,
        repo: ProductRequestStore,
        object_store: ObjectStore,
        offer_repo: OfferStore,
        user_repo: UserStore,
        cfg: Settings,
        notifier: Notifier,
    ):
        self._repo = repo
        self._object_store = object_store
        self._offer_repo = offer_repo
        self._user_repo = user_repo
        self._cfg = cfg
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_product_request(
        self,
        product_request: ProductRequest,
        files: Sequence[FileHeader],
        readers: Sequence[BinaryIO],
    ) -> ProductRequestDetail:
        """Upload the images in order, then persist the request referencing them.

        The stored URIs are signed before the row is written, so the returned
        detail never needs another storage call. An upload, signing or
        persistence failure aborts immediately; objects uploaded before the
        failure are left in the bucket.
        """
        if len(files) != len(readers):
            raise ValidationError(
                f"Got {len(files)} file headers but {len(readers)} file streams"
            )

        uris: list[str] = []
        for file, reader in zip(files, readers):
            try:
                info = await self._object_store.upload_file(
                    file.filename, reader, file.size, file.content_type, IMAGE_FOLDER
                )
            except Exception:
                if uris:
                    logger.warning(
                        "Image upload failed; %d uploaded object(s) left unreferenced: %s",
                        len(uris),
                        uris,
                    )
                raise
            uris.append(info.uri)

        try:
            urls = await self._sign_uris(uris, self._url_ttl())
        except Exception:
            if uris:
                logger.warning(
                    "Signing uploaded images failed; %d object(s) left unreferenced: %s",
                    len(uris),
                    uris,
                )
            raise

        product_request.images = uris
        created = await self._repo.create(product_request)
        logger.info(
            "Created product request %s with %d image(s) for user %s",
            created.id,
            len(uris),
            created.user_id,
        )
        return self._to_detail(created, urls)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _url_ttl(self) -> timedelta:
        """Signed-URL lifetime, parsed from settings on each call."""
        return parse_duration(self._cfg.s3_expiration)

    async def _sign_uris(self, uris: Sequence[str], expires: timedelta) -> list[str]:
        urls: list[str] = []
        for uri in uris:
            url = await self._object_store.get_signed_url(
                self._cfg.s3_bucket_name, image_object_path(uri), expires
            )
            urls.append(url)
        return urls

    @staticmethod
    def _to_detail(
        product_request: ProductRequest,
        urls: list[str],
        *,
        with_transactions: bool = True,
    ) -> ProductRequestDetail:
        return ProductRequestDetail(
            id=product_request.id,
            name=product_request.name,
            desc=product_request.desc,
            category=product_request.category,
            images=urls,
            budget=product_request.budget,
            quantity=product_request.quantity,
            user_id=product_request.user_id,
            delivery_status=product_request.delivery_status,
            selected_offer_id=product_request.selected_offer_id,
            offers=[OfferOut.model_validate(o) for o in product_request.offers],
            transactions=(
                [TransactionOut.model_validate(t) for t in product_request.transactions]
                if with_transactions
                else None
            ),
            created_at=product_request.created_at,
            updated_at=product_request.updated_at,
            deleted_at=product_request.deleted_at,
        )

    async def _get_product_request(self, pr_id: int, *, for_update: bool = False) -> ProductRequest:
        product_request = await self._repo.find_by_id(pr_id, for_update=for_update)
        if product_request is None:
            raise NotFoundError("Product request", pr_id)
        return product_request

    async def get_detail_by_id(self, pr_id: int) -> ProductRequestDetail:
        product_request = await self._get_product_request(pr_id)
        urls = await self._sign_uris(product_request.images or [], self._url_ttl())
        return self._to_detail(product_request, urls)

    async def get_buyer_product_requests_by_user_id(self, user_id: str) -> list[ProductRequestDetail]:
        product_requests = await self._repo.find_by_user_id(user_id)
        expires = self._url_ttl()

        details: list[ProductRequestDetail] = []
        for product_request in product_requests:
            urls = await self._sign_uris(product_request.images or [], expires)
            details.append(self._to_detail(product_request, urls, with_transactions=False))
        return details

    async def get_paginated_product_requests(
        self, page: int, limit: int
    ) -> PaginatedResponse[ProductRequestDetail]:
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        if page < 1:
            raise ValidationError("page must be a positive integer")

        product_requests, total_rows = await self._repo.find_paginated(page, limit)
        expires = self._url_ttl()

        data: list[ProductRequestDetail] = []
        for product_request in product_requests:
            urls = await self._sign_uris(product_request.images or [], expires)
            data.append(self._to_detail(product_request, urls, with_transactions=False))

        return PaginatedResponse[ProductRequestDetail](
            data=data,
            page=page,
            limit=limit,
            total_rows=total_rows,
            total_pages=total_pages(total_rows, limit),
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_product_request(
        self, data: ProductRequestUpdate, pr_id: int, user_id: str
    ) -> ProductRequestDetail:
        product_request = await self._get_product_request(pr_id, for_update=True)

        decision = can_edit_product_request(product_request, user_id)
        if not decision.allowed:
            logger.warning("User %s denied update of product request %s: %s", user_id, pr_id, decision.reason)
            raise ForbiddenError(decision.reason)

        offer = await self._offer_repo.get_by_id(data.selected_offer_id)
        if offer is None:
            raise NotFoundError("Offer", data.selected_offer_id)

        decision = can_select_offer(product_request, offer)
        if not decision.allowed:
            logger.warning(
                "User %s tried to select offer %s on product request %s: %s",
                user_id, offer.id, pr_id, decision.reason,
            )
            raise ForbiddenError(decision.reason)

        # images are unchanged by this update
        urls = await self._sign_uris(product_request.images or [], self._url_ttl())

        product_request.name = data.name
        product_request.desc = data.desc
        product_request.budget = data.budget
        product_request.category = data.category.value
        product_request.quantity = data.quantity
        product_request.selected_offer_id = offer.id
        product_request.selected_offer = offer

        updated = await self._repo.update(product_request)
        logger.info("Product request %s updated; selected offer %s", pr_id, offer.id)
        return self._to_detail(updated, urls)

    async def update_product_request_status(
        self, data: ProductRequestStatusUpdate, pr_id: int, user_id: str
    ) -> ProductRequestDetail:
        """Move the delivery status forward and notify subscribers.

        Every step that can fail runs before the notifier is called, so a
        sent notification always describes the returned state.
        """
        product_request = await self._get_product_request(pr_id, for_update=True)
        selected_offer_id = ensure_offer_selected(product_request)

        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        offer = await self._offer_repo.get_by_id(selected_offer_id)
        if offer is None:
            raise NotFoundError("Offer", selected_offer_id)

        decision = can_update_delivery_status(user, offer, data.delivery_status)
        if not decision.allowed:
            logger.warning(
                "User %s denied status %s on product request %s: %s",
                user_id, data.delivery_status.value, pr_id, decision.reason,
            )
            raise ForbiddenError(decision.reason)

        urls = await self._sign_uris(product_request.images or [], self._url_ttl())

        product_request.delivery_status = data.delivery_status.value
        updated = await self._repo.update(product_request)
        detail = self._to_detail(updated, urls)
        logger.info("Product request %s moved to %s by %s", pr_id, updated.delivery_status, user_id)

        try:
            await self._notifier.notify_product_request(updated)
        except Exception:
            logger.exception(
                "Notification for product request %s (%s) failed",
                pr_id,
                updated.delivery_status,
            )
            raise
        return detail
