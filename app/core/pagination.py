"""Pagination helpers for list endpoints."""


from fastapi import Query


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=10`."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=10, ge=1, le=100, description="Items per page"),
    ):
        self.page = page
        self.limit = limit


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total_rows: int, limit: int) -> int:
    """Integer ceiling of ``total_rows / limit``. *limit* must be positive."""
    return (total_rows + limit - 1) // limit
