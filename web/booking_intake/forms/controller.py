"""State and actions of one travel booking form.

The controller owns the form values, the three editable lists, the upload
control and the draft autosave, and posts the finished booking to the
submission endpoint through an ``httpx.AsyncClient``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..api.v1.schemas.booking_schemas import TravelBookingForm
from ..core.exceptions import ValidationError
from .attachments import (
    ALLOWED_EXTENSIONS,
    EXTENDED_ALLOWED_EXTENSIONS,
    CandidateFile,
    FileUploadField,
)
from .drafts import AUTOSAVE_DELAY, DraftAutosaver, DraftManager, RestoredDraft
from .lists import EditableList, ListVariant
from .placeholders import edit_placeholder
from .presets import (
    CUSTOM_LANGUAGE,
    ITINERARY_LANGUAGES,
    PRESET_EXCLUDES,
    PRESET_INCLUDES,
    PRESET_SPECIAL_TERMS,
)
from .validation import (
    FieldError,
    FormVariant,
    coerce_count,
    coerce_price,
    to_submission,
    validate_for_submit,
)

logger = logging.getLogger(__name__)

SUBMIT_ENDPOINT = "/api/travel-booking"

_PRICE_FIELDS = ("tour_fare", "single_supplement")
_COUNT_FIELDS = ("number_of_delegates", "number_of_tour_leaders")
_BOOL_FIELDS = ("meals_provided", "special_terms_enabled")
_TEXT_FIELDS = ("starting_date", "flight_information", "hotel_selection", "markdown_content")


@dataclass
class SubmitResult:
    ok: bool
    message: str
    errors: List[FieldError] = field(default_factory=list)
    response: Optional[Dict[str, Any]] = None


class TravelBookingFormController:
    def __init__(
        self,
        client: httpx.AsyncClient,
        drafts: DraftManager,
        *,
        variant: FormVariant = FormVariant.BASIC,
        endpoint: str = SUBMIT_ENDPOINT,
        autosave_delay: float = AUTOSAVE_DELAY,
    ):
        self.client = client
        self.drafts = drafts
        self.variant = FormVariant(variant)
        self.endpoint = endpoint
        self.autosaver = DraftAutosaver(drafts, delay=autosave_delay)

        self.values = TravelBookingForm()
        self.includes = EditableList(
            PRESET_INCLUDES, variant=ListVariant.PRESETS_LOCKED, min_items=1, field="tour_fair_includes"
        )
        self.excludes = EditableList(
            PRESET_EXCLUDES, variant=ListVariant.PRESETS_LOCKED, min_items=1, field="tour_fair_excludes"
        )
        self.special_terms = EditableList(
            PRESET_SPECIAL_TERMS, items=[], variant=ListVariant.FREELY_EDITABLE, field="special_terms"
        )
        self.attachment = FileUploadField(
            allowed_extensions=(
                EXTENDED_ALLOWED_EXTENSIONS if self.variant is FormVariant.EXTENDED else ALLOWED_EXTENSIONS
            )
        )

        self.errors: Dict[str, str] = {}
        self.notices: List[str] = []
        self.submitting = False
        self.restored = False
        self.needs_file_reselect = False

    # Draft restore
    def load(self) -> Optional[RestoredDraft]:
        """Start from the stored draft when one is usable"""
        with self.autosaver.suspend():
            draft = self.drafts.load()
            if draft is None:
                return None
            self._apply(draft.values)
            self.restored = True
            self.needs_file_reselect = draft.had_file
            self.notices.append(draft.notice)
            logger.info("Restored form draft saved at %d", draft.saved_at_ms)
        return draft

    def _apply(self, values: TravelBookingForm) -> None:
        self.values = values.model_copy(deep=True)
        self.includes = EditableList(
            PRESET_INCLUDES, values.tour_fair_includes, variant=self.includes.variant,
            min_items=self.includes.min_items, field=self.includes.field,
        )
        self.excludes = EditableList(
            PRESET_EXCLUDES, values.tour_fair_excludes, variant=self.excludes.variant,
            min_items=self.excludes.min_items, field=self.excludes.field,
        )
        self.special_terms = EditableList(
            PRESET_SPECIAL_TERMS, values.special_terms, variant=self.special_terms.variant,
            field=self.special_terms.field,
        )
        self.attachment.remove()
        self.attachment.value = values.uploaded_file
        self.attachment.set_size_limit(values.file_size_limit_enabled)

    def _sync(self) -> None:
        self.values = self.values.model_copy(update={
            "tour_fair_includes": self.includes.items,
            "tour_fair_excludes": self.excludes.items,
            "special_terms": self.special_terms.items,
            "uploaded_file": self.attachment.value,
            "file_size_limit_enabled": self.attachment.size_limit_enabled,
        })

    def _changed(self, *fields: str) -> None:
        self._sync()
        for name in fields:
            self.errors.pop(name, None)
        self.autosaver.schedule(self.values.model_copy(deep=True))

    # Field edits
    def set_field(self, name: str, raw: Any) -> None:
        if name in _PRICE_FIELDS:
            value = coerce_price(raw)
        elif name in _COUNT_FIELDS:
            value = coerce_count(raw)
        elif name in _BOOL_FIELDS:
            value = bool(raw)
        elif name in _TEXT_FIELDS:
            value = "" if raw is None else str(raw)
        else:
            raise ValueError(f"Unknown form field: {name}")
        self.values = self.values.model_copy(update={name: value})
        self._changed(name)

    def choose_language(self, choice: str, custom: str = "") -> str:
        """Pick a preset language or, with ``"custom"``, free text"""
        if choice == CUSTOM_LANGUAGE:
            language = custom.strip()
        elif choice in ITINERARY_LANGUAGES:
            language = choice
        else:
            raise ValidationError(f"Unknown itinerary language: {choice}", field="itinerary_language")
        self.values = self.values.model_copy(update={"itinerary_language": language})
        self._changed("itinerary_language")
        return language

    # Lists
    def list_for(self, name: str) -> EditableList:
        lists = {
            "tour_fair_includes": self.includes,
            "tour_fair_excludes": self.excludes,
            "special_terms": self.special_terms,
        }
        try:
            return lists[name]
        except KeyError:
            raise ValueError(f"Unknown list field: {name}")

    def add_item(self, name: str, text: str) -> int:
        index = self.list_for(name).add(text)
        self._changed(name)
        return index

    def edit_item(self, name: str, index: int, value: str) -> None:
        self.list_for(name).edit(index, value)
        self._changed(name)

    def remove_item(self, name: str, index: int) -> str:
        removed = self.list_for(name).remove(index)
        self._changed(name)
        return removed

    def quick_add_term(self, preset_index: int) -> None:
        self.special_terms.quick_add(preset_index)
        self._changed("special_terms")

    def edit_term_placeholder(self, index: int, segment_index: int, value: str) -> str:
        text = edit_placeholder(self.special_terms.items[index], segment_index, value)
        self.edit_item("special_terms", index, text)
        return text

    # Attachment
    def attach(self, candidate: CandidateFile) -> bool:
        accepted = self.attachment.handle_file(candidate)
        if accepted:
            self.needs_file_reselect = False
            self._changed("uploaded_file")
        return accepted

    def remove_attachment(self) -> None:
        self.attachment.remove()
        self._changed("uploaded_file")

    def set_size_limit(self, enabled: bool) -> None:
        self.attachment.set_size_limit(enabled)
        self._changed("file_size_limit_enabled")

    # Submission
    async def submit(self) -> SubmitResult:
        """Validate locally, then post the booking once.

        While a request is in flight further calls are refused. On success
        the draft is deleted and the form starts over.
        """
        if self.submitting:
            return SubmitResult(ok=False, message="A submission is already in progress")

        self._sync()
        errors = validate_for_submit(self.values, self.variant)
        self.errors = {e.field: e.message for e in errors}
        if errors:
            return SubmitResult(ok=False, message=errors[0].message, errors=errors)

        self.submitting = True
        try:
            response = await self.client.post(self.endpoint, json=to_submission(self.values, self.variant))
        except httpx.HTTPError as exc:
            logger.error("Submission request failed: %s", exc)
            return SubmitResult(ok=False, message="Failed to submit form. Please try again.")
        finally:
            self.submitting = False

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not response.is_success:
            message = body.get("message") or f"HTTP error! status: {response.status_code}"
            server_errors = [FieldError(e["field"], e["message"]) for e in body.get("errors", [])]
            for error in server_errors:
                self.errors.setdefault(error.field, error.message)
            return SubmitResult(ok=False, message=message, errors=server_errors, response=body)

        message = body.get("message") or "Travel booking submitted successfully!"
        with self.autosaver.suspend():
            self.drafts.clear()
            self.reset()
        self.notices.append(message)
        return SubmitResult(ok=True, message=message, response=body)

    def reset(self) -> None:
        with self.autosaver.suspend():
            self._apply(TravelBookingForm())
            self.errors = {}
            self.restored = False
            self.needs_file_reselect = False
