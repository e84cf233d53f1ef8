"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  product_request.py  — buyers' requests (images, selected offer, delivery status)
  offer.py            — travelers' offers against a request
  transaction.py      — payments recorded against a request
  user.py             — marketplace users and their role
  types.py            — DeliveryStatus / UserRole / Category enums
  mixins.py           — shared TimestampMixin (soft-delete via deleted_at)
"""

from app.domain.offer import Offer
from app.domain.product_request import ProductRequest
from app.domain.transaction import Transaction
from app.domain.user import User

__all__ = [
    "Offer",
    "ProductRequest",
    "Transaction",
    "User",
]
