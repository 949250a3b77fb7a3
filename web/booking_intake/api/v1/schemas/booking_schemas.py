import base64
import binascii
import re
from datetime import date
from typing import Optional, List, Dict, Any, Union

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from ....forms.presets import PRESET_INCLUDES, PRESET_EXCLUDES


_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class UploadedFile(BaseModel):
    """Attached document; ``data`` is the base64 text of the raw bytes"""
    filename: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    type: str
    data: str

    @field_validator("data")
    @classmethod
    def data_must_be_base64(cls, v: str) -> str:
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError):
            raise PydanticCustomError("base64", "File data must be base64 encoded")
        return v


class TravelBookingForm(BaseModel):
    """Lenient view of a booking, used while the form is being edited.

    Every field has the value a fresh form starts with, so a partially filled
    draft always validates.
    """
    starting_date: Optional[str] = None
    meals_provided: bool = False
    flight_information: Optional[str] = ""
    number_of_delegates: int = 1
    number_of_tour_leaders: int = 1
    hotel_selection: Optional[str] = ""
    tour_fare: Optional[float] = None
    single_supplement: Optional[float] = None
    special_terms_enabled: bool = False
    special_terms: List[str] = Field(default_factory=list)
    tour_fair_includes: List[str] = Field(default_factory=lambda: list(PRESET_INCLUDES))
    tour_fair_excludes: List[str] = Field(default_factory=lambda: list(PRESET_EXCLUDES))
    uploaded_file: Optional[UploadedFile] = None
    markdown_content: Optional[str] = ""
    file_size_limit_enabled: bool = True
    itinerary_language: str = ""


class TravelBookingSubmission(TravelBookingForm):
    """Strict view of the same shape, enforced when a booking is submitted"""
    meals_provided: bool
    flight_information: str = ""
    hotel_selection: Optional[str] = None
    tour_fare: Optional[Union[int, float]] = None
    single_supplement: Optional[Union[int, float]] = None
    tour_fair_includes: List[str]
    tour_fair_excludes: List[str]
    uploaded_file: Optional[UploadedFile] = Field(None, validate_default=True)
    markdown_content: str = ""
    file_size_limit_enabled: bool
    itinerary_language: str = Field("", validate_default=True)

    @field_validator("starting_date", mode="before")
    @classmethod
    def blank_date_is_null(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("starting_date")
    @classmethod
    def date_must_be_iso(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            if not _ISO_DATE_RE.match(v):
                raise ValueError(v)
            date.fromisoformat(v)
        except ValueError:
            raise PydanticCustomError("date_format", "Starting date must be a YYYY-MM-DD date")
        return v

    @field_validator("number_of_delegates")
    @classmethod
    def at_least_one_delegate(cls, v: int) -> int:
        if v < 1:
            raise PydanticCustomError("min_delegates", "At least 1 delegate is required")
        return v

    @field_validator("number_of_tour_leaders")
    @classmethod
    def at_least_one_tour_leader(cls, v: int) -> int:
        if v < 1:
            raise PydanticCustomError("min_tour_leaders", "At least 1 tour leader is required")
        return v

    @field_validator("tour_fare", "single_supplement")
    @classmethod
    def price_not_negative(cls, v):
        if v is not None and v < 0:
            raise PydanticCustomError("price_negative", "Price cannot be negative")
        return v

    @field_validator("hotel_selection")
    @classmethod
    def hotel_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise PydanticCustomError("hotel_required", "Hotel selection is required")
        return v

    @field_validator("tour_fair_includes")
    @classmethod
    def includes_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise PydanticCustomError("includes_required", "At least one include item is required")
        return v

    @field_validator("tour_fair_excludes")
    @classmethod
    def excludes_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise PydanticCustomError("excludes_required", "At least one exclude item is required")
        return v

    @field_validator("uploaded_file")
    @classmethod
    def file_required(cls, v: Optional[UploadedFile]) -> Optional[UploadedFile]:
        if v is None:
            raise PydanticCustomError("file_required", "Document upload is required")
        return v

    @field_validator("itinerary_language")
    @classmethod
    def language_required(cls, v: str) -> str:
        if not v.strip():
            raise PydanticCustomError(
                "language_required", "Please select or enter an itinerary language"
            )
        return v


# Response schemas
class FieldErrorOut(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    success: bool = False
    message: str = "Validation error"
    errors: List[FieldErrorOut]


class SubmissionResponse(BaseModel):
    """Uniform success body; optional keys are omitted when unset"""
    success: bool = True
    message: str
    id: Optional[str] = None
    webhookDelivered: Optional[bool] = None
    webhookResponse: Optional[Any] = None
    webhookError: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
