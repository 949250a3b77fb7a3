from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..core.exceptions import WebhookDeliveryError


logger = logging.getLogger(__name__)


class DeliveryStatus(str, enum.Enum):
    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one forwarding attempt.

    Delivery problems are reported here instead of being raised so callers
    can decide on retry or alerting themselves.
    """

    status: DeliveryStatus
    response: Optional[Any] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def delivered(self) -> bool:
        return self.status is DeliveryStatus.DELIVERED


class WebhookService:
    """Lightweight async client relaying bookings to a workflow webhook."""

    def __init__(
        self,
        url: Optional[str],
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the webhook client.

        Args:
            url: Forwarding URL. ``None`` turns forwarding into a no-op.
            timeout: Seconds to wait for the target before giving up
            transport: Optional httpx transport, used to stub the target in tests
        """
        self.url = url
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.url)

    async def forward(self, payload: Dict[str, Any]) -> DeliveryResult:
        """POST the payload as JSON; only ``Content-Type`` is set explicitly.

        Args:
            payload: Validated booking exactly as it should reach the target
        """
        if not self.url:
            return DeliveryResult(status=DeliveryStatus.SKIPPED)

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self.url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                if not response.is_success:
                    logger.error("Webhook failed with status: %s", response.status_code)
                    raise WebhookDeliveryError(response.status_code, response.text or "Unknown error")
            except WebhookDeliveryError as exc:
                logger.exception("Webhook submission error: %s", exc.reason)
                return DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    error=exc.reason,
                    status_code=exc.response_status,
                )
            except httpx.HTTPError as exc:
                logger.exception("Webhook submission error: %s", exc)
                return DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    error=str(exc) or exc.__class__.__name__,
                )

        try:
            body = response.json()
        except ValueError:
            body = {"success": True}

        logger.info("Booking forwarded to webhook (status %s)", response.status_code)
        return DeliveryResult(
            status=DeliveryStatus.DELIVERED,
            response=body,
            status_code=response.status_code,
        )
