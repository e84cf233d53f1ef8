"""Standardized JSON response envelope helpers."""


from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Single-item response envelope: `{ data: {...} }`"""

    data: T

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated list envelope: `{ data: [...], page, limit, totalRows, totalPages }`"""

    data: list[T]
    page: int
    limit: int
    total_rows: int
    total_pages: int

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
    }
