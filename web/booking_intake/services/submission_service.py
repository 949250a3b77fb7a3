"""Accept, record and forward travel booking submissions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from pydantic import ValidationError as PydanticValidationError

from ..core.base import BaseService
from ..core.exceptions import NotFoundError, PayloadValidationError
from ..infrastructure.repositories.booking_repository import IBookingRepository
from ..api.v1.schemas.booking_schemas import TravelBookingSubmission, SubmissionResponse
from .webhook_service import WebhookService, DeliveryResult, DeliveryStatus

logger = logging.getLogger(__name__)

MESSAGE_DELIVERED = "Travel booking submitted successfully to webhook"
MESSAGE_DELIVERY_FAILED = "Travel booking received successfully (webhook delivery failed)"
MESSAGE_NO_WEBHOOK = "Travel booking received successfully (no webhook configured)"


def format_validation_errors(exc, *, skip_prefix: tuple = ()) -> list[dict]:
    """Flatten pydantic errors into ``{"field", "message"}`` entries.

    Leading location parts listed in ``skip_prefix`` (``"body"`` for request
    validation) are dropped so the field reads as the payload key.
    """
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        while loc and loc[0] in skip_prefix:
            loc = loc[1:]
        if error.get("type") == "json_invalid":
            loc = []
        errors.append({
            "field": ".".join(loc),
            "message": error["msg"],
        })
    return errors


def parse_submission(data: Dict[str, Any]) -> TravelBookingSubmission:
    """Validate raw data against the strict booking schema.

    Raises:
        PayloadValidationError: with per-field errors when validation fails
    """
    try:
        return TravelBookingSubmission.model_validate(data)
    except PydanticValidationError as exc:
        raise PayloadValidationError(format_validation_errors(exc))


@dataclass(frozen=True)
class SubmissionOutcome:
    record: Dict[str, Any]
    payload: Dict[str, Any]
    delivery: DeliveryResult

    def to_response(self) -> SubmissionResponse:
        """Build the client-facing body for this outcome"""
        booking_id = self.record["id"]
        if self.delivery.status is DeliveryStatus.DELIVERED:
            return SubmissionResponse(
                message=MESSAGE_DELIVERED,
                id=booking_id,
                webhookDelivered=True,
                webhookResponse=self.delivery.response,
            )
        if self.delivery.status is DeliveryStatus.FAILED:
            return SubmissionResponse(
                message=MESSAGE_DELIVERY_FAILED,
                id=booking_id,
                webhookDelivered=False,
                webhookError=self.delivery.error,
                data=self.payload,
            )
        return SubmissionResponse(
            message=MESSAGE_NO_WEBHOOK,
            id=booking_id,
            data=self.payload,
        )


class SubmissionService(BaseService):
    """Service for travel booking submissions."""

    def __init__(self, repository: IBookingRepository, webhook: WebhookService):
        super().__init__(repository)
        self.webhook = webhook

    async def submit(self, booking: TravelBookingSubmission) -> SubmissionOutcome:
        """Record a validated booking and relay it to the webhook.

        The forwarded body holds exactly the fields the caller sent. A failed
        delivery is reported on the outcome, never raised.

        Args:
            booking: Booking already validated against the strict schema

        Returns:
            SubmissionOutcome with the stored record and delivery result
        """
        payload = booking.model_dump(mode="json", exclude_unset=True)
        logger.info(
            "Travel booking received: language=%s includes=%d excludes=%d file=%s",
            booking.itinerary_language,
            len(booking.tour_fair_includes),
            len(booking.tour_fair_excludes),
            booking.uploaded_file.filename if booking.uploaded_file else None,
        )

        record = await self.repository.create(obj_in=payload)
        delivery = await self.webhook.forward(payload)

        if delivery.status is DeliveryStatus.FAILED:
            logger.warning("Booking %s accepted without webhook delivery", record["id"])

        return SubmissionOutcome(record=record, payload=payload, delivery=delivery)

    async def get_booking(self, booking_id: str) -> Dict[str, Any]:
        """Get a stored booking.

        Raises:
            NotFoundError: if no booking has this id
        """
        record = await self.repository.get(booking_id)
        if record is None:
            raise NotFoundError("Travel booking", booking_id)
        return record
