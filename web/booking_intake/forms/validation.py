"""Client-side checks run before a booking leaves the form."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..api.v1.schemas.booking_schemas import TravelBookingForm, TravelBookingSubmission


class FormVariant(str, enum.Enum):
    BASIC = "basic"
    # Adds hotel selection and delegate/leader counts as required fields.
    EXTENDED = "extended"


# Order the fields appear on the page; the first failing one is surfaced.
FIELD_ORDER = (
    "starting_date",
    "meals_provided",
    "flight_information",
    "number_of_delegates",
    "number_of_tour_leaders",
    "hotel_selection",
    "tour_fare",
    "single_supplement",
    "special_terms_enabled",
    "special_terms",
    "tour_fair_includes",
    "tour_fair_excludes",
    "uploaded_file",
    "markdown_content",
    "file_size_limit_enabled",
    "itinerary_language",
)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def coerce_price(raw: Any) -> Optional[float]:
    """Parse a price input; anything unparsable becomes None"""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def coerce_count(raw: Any) -> int:
    """Parse a delegate/leader count; anything unparsable becomes 1"""
    if isinstance(raw, bool):
        return 1
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return 1


def to_submission(values: TravelBookingForm, variant: FormVariant = FormVariant.BASIC) -> Dict[str, Any]:
    """Turn form values into the payload posted to the endpoint"""
    data: Dict[str, Any] = {
        "starting_date": values.starting_date or None,
        "meals_provided": values.meals_provided,
        "flight_information": values.flight_information or "",
        "tour_fair_includes": list(values.tour_fair_includes),
        "tour_fair_excludes": list(values.tour_fair_excludes),
        "uploaded_file": values.uploaded_file.model_dump() if values.uploaded_file else None,
        "file_size_limit_enabled": values.file_size_limit_enabled,
        "itinerary_language": values.itinerary_language.strip(),
        "tour_fare": values.tour_fare,
        "single_supplement": values.single_supplement,
        "special_terms_enabled": values.special_terms_enabled,
        "special_terms": list(values.special_terms) if values.special_terms_enabled else [],
        "markdown_content": values.markdown_content or "",
    }
    if variant is FormVariant.EXTENDED:
        data["number_of_delegates"] = values.number_of_delegates
        data["number_of_tour_leaders"] = values.number_of_tour_leaders
        data["hotel_selection"] = values.hotel_selection or ""
    return data


def validate_for_submit(
    values: TravelBookingForm, variant: FormVariant = FormVariant.BASIC
) -> List[FieldError]:
    """Check the values against the strict schema without touching the network.

    Returns errors ordered as the fields appear on the form, one per field;
    an empty list means the booking may be sent.
    """
    payload = to_submission(values, variant)
    by_field: Dict[str, str] = {}
    try:
        TravelBookingSubmission.model_validate(payload)
    except PydanticValidationError as exc:
        for error in exc.errors():
            field = str(error["loc"][0]) if error.get("loc") else ""
            by_field.setdefault(field, error["msg"])

    order = {name: i for i, name in enumerate(FIELD_ORDER)}
    return [
        FieldError(field, message)
        for field, message in sorted(by_field.items(), key=lambda kv: order.get(kv[0], len(order)))
    ]


def first_error(errors: List[FieldError]) -> Optional[FieldError]:
    return errors[0] if errors else None
