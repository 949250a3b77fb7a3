from .booking_schemas import (
    UploadedFile,
    TravelBookingForm,
    TravelBookingSubmission,
    FieldErrorOut,
    ValidationErrorResponse,
    SubmissionResponse,
)

__all__ = [
    "UploadedFile",
    "TravelBookingForm",
    "TravelBookingSubmission",
    "FieldErrorOut",
    "ValidationErrorResponse",
    "SubmissionResponse",
]
