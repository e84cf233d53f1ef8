"""Outbound notifications for product-request status changes.

Events are POSTed as JSON to ``NOTIFICATION_WEBHOOK_URL``. Without a
configured URL the event is only logged.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.config import Settings
from app.core.exceptions import NotificationError
from app.domain.product_request import ProductRequest

logger = logging.getLogger(__name__)

STATUS_UPDATED_EVENT = "product_request.status_updated"


def _status_payload(product_request: ProductRequest) -> dict[str, Any]:
    return {
        "event": STATUS_UPDATED_EVENT,
        "productRequestId": product_request.id,
        "deliveryStatus": product_request.delivery_status,
        "userId": product_request.user_id,
        "selectedOfferId": product_request.selected_offer_id,
    }


class WebhookNotifier:
    def __init__(self, cfg: Settings, client: httpx.AsyncClient | None = None):
        self._cfg = cfg
        self._client = client

    async def notify_product_request(self, product_request: ProductRequest) -> None:
        payload = _status_payload(product_request)
        if not self._cfg.notifications_enabled:
            logger.info(
                "Notification webhook not configured; skipping %s for product request %s",
                STATUS_UPDATED_EVENT,
                product_request.id,
            )
            return

        try:
            if self._client is not None:
                response = await self._client.post(
                    self._cfg.notification_webhook_url, json=payload
                )
            else:
                async with httpx.AsyncClient(timeout=self._cfg.notification_timeout) as client:
                    response = await client.post(
                        self._cfg.notification_webhook_url, json=payload
                    )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationError(
                f"Failed to notify status change of product request {product_request.id}: {exc}"
            ) from exc

        logger.info(
            "Sent %s for product request %s (%s)",
            STATUS_UPDATED_EVENT,
            product_request.id,
            product_request.delivery_status,
        )
