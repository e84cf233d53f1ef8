"""Product request Pydantic schemas (request DTOs and response models)."""


from datetime import datetime
from decimal import Decimal

from pydantic import Field

from app.domain.types import Category, DeliveryStatus
from app.schemas.common import CamelModel

class ProductRequestUpdate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    desc: str | None = None
    category: Category
    budget: Decimal = Field(gt=0)
    quantity: int = Field(ge=1)
    selected_offer_id: int

class ProductRequestStatusUpdate(CamelModel):
    delivery_status: DeliveryStatus

class OfferOut(CamelModel):
    id: int
    user_id: str
    product_request_id: int
    offer_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

class TransactionOut(CamelModel):
    id: str
    user_id: str
    product_request_id: int
    amount: Decimal
    currency: str
    status: str
    created_at: datetime

class ProductRequestDetail(CamelModel):
    """Read model returned to clients; ``images`` holds signed URLs, not storage paths."""

    id: int
    name: str
    desc: str | None = None
    category: str
    images: list[str]
    budget: Decimal
    quantity: int
    user_id: str | None = None
    delivery_status: str
    selected_offer_id: int | None = None
    offers: list[OfferOut] = Field(default_factory=list)
    transactions: list[TransactionOut] | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
