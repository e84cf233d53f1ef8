"""SQLAlchemy ORM model for traveler offers against product requests."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import TimestampMixin


class Offer(Base, TimestampMixin):
    """One traveler's bid to fulfil a product request."""

    __tablename__ = "offers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_request_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("product_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    offer_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
