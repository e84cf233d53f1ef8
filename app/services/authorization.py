"""Authorization policy for product-request mutations.

Each check returns a :class:`Decision` instead of raising, so callers decide
how a denial surfaces. The one state guard, :func:`ensure_offer_selected`,
raises because it is not a permission question.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.core.exceptions import InvalidStateError
from app.domain.offer import Offer
from app.domain.product_request import ProductRequest
from app.domain.types import DeliveryStatus
from app.domain.user import User


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


ALLOW = Decision(allowed=True)


def _deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


def ensure_offer_selected(product_request: ProductRequest) -> int:
    """Return the selected offer id, or raise when the request has none yet."""
    if product_request.selected_offer_id is None:
        raise InvalidStateError(
            "Delivery status cannot be updated before an offer is selected"
        )
    return product_request.selected_offer_id


def can_edit_product_request(product_request: ProductRequest, caller_user_id: str) -> Decision:
    if product_request.user_id is None or product_request.user_id != caller_user_id:
        return _deny("Only the owner can update this product request")
    return ALLOW


def can_select_offer(product_request: ProductRequest, offer: Offer) -> Decision:
    if not any(o.id == offer.id for o in product_request.offers):
        return _deny("Offer was not made on this product request")
    return ALLOW


def can_update_delivery_status(
    user: User, selected_offer: Offer, target: DeliveryStatus | str
) -> Decision:
    """Admins may set any status; the winning traveler may only mark it Purchased."""
    if user.is_admin:
        return ALLOW
    if selected_offer.user_id != user.id:
        return _deny("Only the traveler of the selected offer can update the delivery status")
    if DeliveryStatus(target) is not DeliveryStatus.PURCHASED:
        return _deny(f"Travelers may only set the status to {DeliveryStatus.PURCHASED.value}")
    return ALLOW
