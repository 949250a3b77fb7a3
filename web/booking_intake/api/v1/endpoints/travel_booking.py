"""Travel booking submission endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.encoders import jsonable_encoder

from ....deps import SubmissionServiceDep
from ..schemas.booking_schemas import (
    TravelBookingSubmission,
    SubmissionResponse,
    ValidationErrorResponse,
)

router = APIRouter(prefix="/travel-booking")
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=SubmissionResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ValidationErrorResponse}},
)
async def submit_travel_booking(booking: TravelBookingSubmission, service: SubmissionServiceDep):
    """Validate, record and forward a travel booking."""
    outcome = await service.submit(booking)
    return outcome.to_response()


@router.get("/schema")
async def travel_booking_schema():
    """JSON Schema of the strict submission shape, for form clients."""
    return TravelBookingSubmission.model_json_schema()


@router.get("/{booking_id}")
async def get_travel_booking(booking_id: str, service: SubmissionServiceDep):
    """Look up a previously accepted booking."""
    record = await service.get_booking(booking_id)
    return {"success": True, "data": jsonable_encoder(record)}
