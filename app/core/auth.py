"""Caller identity for authenticated routes.

Token verification happens at the gateway; requests reach this service with
the authenticated user id in the ``X-User-Id`` header.
"""

from typing import Annotated

from fastapi import Depends, Header

from app.core.exceptions import UnauthorizedError


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str:
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError()
    return x_user_id.strip()


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
