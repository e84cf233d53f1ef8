"""Product request router — thin HTTP layer over ProductRequestService.

Pattern:
  1. Resolve the caller from the X-User-Id header
  2. Build the service from the request-scoped session via Depends
  3. Call service methods and wrap the result in a response envelope

Image validation (type, size, emptiness) is an HTTP concern and stays here.
"""


import io
import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentUserId
from app.core.config import settings
from app.core.pagination import PaginationParams
from app.core.response import DataResponse, PaginatedResponse
from app.db.base import get_db
from app.domain.product_request import ProductRequest
from app.domain.types import Category
from app.repositories.interfaces import Notifier, ObjectStore
from app.repositories.object_store import get_object_store
from app.repositories.offer import OfferRepository
from app.repositories.product_request import ProductRequestRepository
from app.repositories.user import UserRepository
from app.schemas.product_request import (
    ProductRequestDetail,
    ProductRequestStatusUpdate,
    ProductRequestUpdate,
)
from app.services.notification import WebhookNotifier
from app.services.product_request import FileHeader, ProductRequestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/product-requests", tags=["Product Requests"])

_ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}


# ------------------------------------------------------------------
# Dependencies
# ------------------------------------------------------------------

def get_notifier() -> Notifier:
    return WebhookNotifier(settings)


def get_product_request_service(
    session: AsyncSession = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
    notifier: Notifier = Depends(get_notifier),
) -> ProductRequestService:
    return ProductRequestService(
        repo=ProductRequestRepository(session),
        object_store=object_store,
        offer_repo=OfferRepository(session),
        user_repo=UserRepository(session),
        cfg=settings,
        notifier=notifier,
    )


async def _read_image(file: UploadFile) -> tuple[FileHeader, io.BytesIO]:
    """Validate one uploaded image and return its header plus an in-memory reader."""
    if (file.content_type or "") not in _ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=415,
            detail=(
                f"Unsupported image type '{file.content_type}'. "
                f"Accepted formats: {', '.join(sorted(_ALLOWED_IMAGE_TYPES))}"
            ),
        )

    contents = await file.read()

    if len(contents) == 0:
        raise HTTPException(status_code=400, detail=f"Uploaded file '{file.filename}' is empty.")

    if len(contents) > settings.max_upload_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size exceeds the {settings.max_upload_size_mb}MB limit.",
        )

    header = FileHeader(
        filename=file.filename or "image",
        size=len(contents),
        content_type=file.content_type or "application/octet-stream",
    )
    return header, io.BytesIO(contents)


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post(
    "",
    response_model=DataResponse[ProductRequestDetail],
    status_code=status.HTTP_201_CREATED,
)
async def create_product_request(
    user_id: CurrentUserId,
    name: str = Form(..., min_length=1, max_length=255),
    category: Category = Form(...),
    budget: Decimal = Form(..., gt=0),
    quantity: int = Form(default=1, ge=1),
    desc: Optional[str] = Form(default=None),
    images: list[UploadFile] = File(default=[]),
    svc: ProductRequestService = Depends(get_product_request_service),
):
    """Create a product request owned by the caller, uploading its images."""
    headers: list[FileHeader] = []
    readers: list[io.BytesIO] = []
    for upload in images:
        header, reader = await _read_image(upload)
        headers.append(header)
        readers.append(reader)

    product_request = ProductRequest(
        user_id=user_id,
        name=name,
        desc=desc,
        category=category.value,
        budget=budget,
        quantity=quantity,
    )
    return {"data": await svc.create_product_request(product_request, headers, readers)}


@router.get("", response_model=PaginatedResponse[ProductRequestDetail])
async def list_product_requests(
    pagination: PaginationParams = Depends(),
    svc: ProductRequestService = Depends(get_product_request_service),
):
    """List all product requests (paginated, newest first)."""
    return await svc.get_paginated_product_requests(pagination.page, pagination.limit)


@router.get("/buyer", response_model=DataResponse[list[ProductRequestDetail]])
async def list_buyer_product_requests(
    user_id: CurrentUserId,
    svc: ProductRequestService = Depends(get_product_request_service),
):
    """List the caller's own product requests."""
    return {"data": await svc.get_buyer_product_requests_by_user_id(user_id)}


@router.get("/{pr_id}", response_model=DataResponse[ProductRequestDetail])
async def get_product_request(
    pr_id: int,
    svc: ProductRequestService = Depends(get_product_request_service),
):
    return {"data": await svc.get_detail_by_id(pr_id)}


@router.patch("/{pr_id}", response_model=DataResponse[ProductRequestDetail])
async def update_product_request(
    pr_id: int,
    body: ProductRequestUpdate,
    user_id: CurrentUserId,
    svc: ProductRequestService = Depends(get_product_request_service),
):
    """Owner-only: edit fields and choose the winning offer."""
    return {"data": await svc.update_product_request(body, pr_id, user_id)}


@router.patch("/{pr_id}/status", response_model=DataResponse[ProductRequestDetail])
async def update_product_request_status(
    pr_id: int,
    body: ProductRequestStatusUpdate,
    user_id: CurrentUserId,
    svc: ProductRequestService = Depends(get_product_request_service),
):
    """Admins set any status; the selected offer's traveler may mark it Purchased."""
    return {"data": await svc.update_product_request_status(body, pr_id, user_id)}
