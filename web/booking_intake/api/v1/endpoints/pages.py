"""Server-rendered booking form page."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import FormData, UploadFile

from ....core.exceptions import PayloadValidationError
from ....deps import SettingsDep, SubmissionServiceDep
from ....forms.attachments import (
    ALLOWED_EXTENSIONS,
    EXTENDED_ALLOWED_EXTENSIONS,
    MAX_FILE_SIZE,
    CandidateFile,
    FileUploadField,
    format_file_size,
)
from ....forms.lists import EditableList, ListVariant
from ....forms.placeholders import edit_placeholder, segment_template, is_plain
from ....forms.presets import (
    CUSTOM_LANGUAGE,
    ITINERARY_LANGUAGES,
    PRESET_EXCLUDES,
    PRESET_INCLUDES,
    PRESET_SPECIAL_TERMS,
)
from ....forms.validation import FormVariant, coerce_count, coerce_price, to_submission, validate_for_submit
from ....services.submission_service import parse_submission
from ..schemas.booking_schemas import TravelBookingForm

router = APIRouter()
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[3] / "templates"))


def _allowed_extensions(variant: FormVariant):
    return EXTENDED_ALLOWED_EXTENSIONS if variant is FormVariant.EXTENDED else ALLOWED_EXTENSIONS


def _page_context(
    request: Request,
    values: TravelBookingForm,
    variant: FormVariant,
    *,
    errors: Optional[Dict[str, str]] = None,
    message: Optional[str] = None,
    success: bool = False,
) -> Dict[str, Any]:
    includes = EditableList(PRESET_INCLUDES, values.tour_fair_includes, variant=ListVariant.PRESETS_LOCKED)
    excludes = EditableList(PRESET_EXCLUDES, values.tour_fair_excludes, variant=ListVariant.PRESETS_LOCKED)
    terms = []
    for text in values.special_terms:
        segments = segment_template(text)
        terms.append({"text": text, "segments": segments, "plain": is_plain(segments)})

    language = values.itinerary_language
    return {
        "request": request,
        "values": values,
        "variant": variant.value,
        "includes": includes.entries(),
        "excludes": excludes.entries(),
        "special_terms": terms,
        "preset_terms": PRESET_SPECIAL_TERMS,
        "languages": ITINERARY_LANGUAGES,
        "language_choice": (
            language if language in ITINERARY_LANGUAGES else (CUSTOM_LANGUAGE if language else "")
        ),
        "custom_language_value": CUSTOM_LANGUAGE,
        "accept": ",".join(_allowed_extensions(variant)),
        "max_file_size": format_file_size(MAX_FILE_SIZE),
        "errors": errors or {},
        "message": message,
        "success": success,
    }


def _special_terms_from_form(form: FormData) -> List[str]:
    """Rebuild each term from its template and edited placeholder inputs"""
    terms = []
    for i, template in enumerate(form.getlist("special_terms")):
        text = str(template)
        prefix = f"special_terms_{i}_"
        edits = sorted(
            ((int(key[len(prefix):]), str(form[key])) for key in form.keys()
             if key.startswith(prefix) and key[len(prefix):].isdigit()),
            reverse=True,
        )
        for segment_index, value in edits:
            try:
                text = edit_placeholder(text, segment_index, value)
            except (IndexError, ValueError):
                logger.debug("Ignoring stale placeholder input %s%d", prefix, segment_index)
        terms.append(text)
    return terms


def _values_from_form(form: FormData) -> TravelBookingForm:
    def text(name: str) -> str:
        return str(form.get(name) or "")

    choice = text("language_choice")
    language = text("custom_language").strip() if choice == CUSTOM_LANGUAGE else choice

    return TravelBookingForm(
        starting_date=text("starting_date") or None,
        meals_provided=text("meals_provided") == "yes",
        flight_information=text("flight_information"),
        number_of_delegates=coerce_count(form.get("number_of_delegates")),
        number_of_tour_leaders=coerce_count(form.get("number_of_tour_leaders")),
        hotel_selection=text("hotel_selection"),
        tour_fare=coerce_price(form.get("tour_fare")),
        single_supplement=coerce_price(form.get("single_supplement")),
        special_terms_enabled=form.get("special_terms_enabled") is not None,
        special_terms=_special_terms_from_form(form),
        tour_fair_includes=[str(v) for v in form.getlist("tour_fair_includes") if str(v).strip()],
        tour_fair_excludes=[str(v) for v in form.getlist("tour_fair_excludes") if str(v).strip()],
        markdown_content=text("markdown_content"),
        file_size_limit_enabled=form.get("file_size_limit_enabled") is not None,
        itinerary_language=language,
    )


@router.get("/", response_class=HTMLResponse)
async def booking_form_page(request: Request, settings: SettingsDep):
    """Empty booking form."""
    variant = FormVariant(settings.FORM_VARIANT)
    return templates.TemplateResponse(
        request, "travel_booking.html", _page_context(request, TravelBookingForm(), variant)
    )


@router.post("/travel-booking/form", response_class=HTMLResponse)
async def submit_booking_form(
    request: Request,
    settings: SettingsDep,
    service: SubmissionServiceDep,
):
    """Handle the booking form posted as multipart form data."""
    variant = FormVariant(settings.FORM_VARIANT)
    form = await request.form()
    values = _values_from_form(form)
    errors: Dict[str, str] = {}

    upload = FileUploadField(
        size_limit_enabled=values.file_size_limit_enabled,
        allowed_extensions=_allowed_extensions(variant),
    )
    document = form.get("document")
    if isinstance(document, UploadFile) and document.filename:
        content = await document.read()
        upload.handle_file(CandidateFile(document.filename, content, document.content_type or ""))
        if upload.error:
            errors["uploaded_file"] = upload.error
    values = values.model_copy(update={"uploaded_file": upload.value})

    for error in validate_for_submit(values, variant):
        errors.setdefault(error.field, error.message)

    if not errors:
        try:
            booking = parse_submission(to_submission(values, variant))
        except PayloadValidationError as exc:
            errors = {e["field"]: e["message"] for e in exc.errors}

    if errors:
        context = _page_context(
            request, values, variant, errors=errors,
            message="Please fix the validation errors before submitting.",
        )
        return templates.TemplateResponse(request, "travel_booking.html", context, status_code=400)

    outcome = await service.submit(booking)
    context = _page_context(
        request, TravelBookingForm(), variant,
        message=outcome.to_response().message, success=True,
    )
    return templates.TemplateResponse(request, "travel_booking.html", context)
