"""Base schema for the JSON API.

Fields are snake_case in Python and camelCase on the wire (``selectedOfferId``,
``deliveryStatus``). ``from_attributes`` lets read models validate straight
from ORM rows such as ``Offer`` and ``Transaction``.
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class HealthResponse(BaseModel):
    """Liveness payload: service name and ``APP_ENV``."""

    status: str = "ok"
    app: str
    env: str
