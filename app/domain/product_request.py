"""SQLAlchemy ORM model for buyers' product requests.

A request is created by its owner with an initial image set and no selected
offer. Travelers attach offers to it; the owner then picks one as the
selected offer, after which the delivery status moves forward.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.mixins import TimestampMixin
from app.domain.offer import Offer
from app.domain.transaction import Transaction
from app.domain.types import DeliveryStatus


class ProductRequest(Base, TimestampMixin):
    __tablename__ = "product_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    desc: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    budget: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Ordered "<bucket>/<key>" object-storage references
    images: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    selected_offer_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("offers.id", use_alter=True, name="fk_product_requests_selected_offer_id"),
        nullable=True,
    )
    delivery_status: Mapped[str] = mapped_column(
        String(30), default=DeliveryStatus.OPENING.value, nullable=False, index=True
    )

    offers: Mapped[List[Offer]] = relationship(
        foreign_keys=[Offer.product_request_id], lazy="selectin", order_by=Offer.id
    )
    selected_offer: Mapped[Optional[Offer]] = relationship(
        foreign_keys=[selected_offer_id], lazy="selectin", post_update=True
    )
    transactions: Mapped[List[Transaction]] = relationship(lazy="selectin")
