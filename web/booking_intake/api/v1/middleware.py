import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from booking_intake.core import BaseError, PayloadValidationError
from booking_intake.services.submission_service import format_validation_errors

logger = logging.getLogger(__name__)


async def base_error_handler(request: Request, exc: BaseError):
    """Handle our custom exceptions"""
    content = {"success": False, "message": exc.message}
    if isinstance(exc, PayloadValidationError):
        content["errors"] = exc.errors
    elif exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def unexpected_error_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error": str(exc) or exc.__class__.__name__,
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request validation errors, including malformed JSON"""
    errors = format_validation_errors(exc, skip_prefix=("body",))
    for error in errors:
        if not error["field"]:
            error["field"] = "body"

    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation error",
            "errors": errors,
        }
    )
