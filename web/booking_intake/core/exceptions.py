from typing import Any, Optional, Dict, List


class BaseError(Exception):
    """Base exception class for the application"""

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """Exception raised when an entity is not found"""

    def __init__(self, entity: str, id: Any):
        super().__init__(
            message=f"{entity} with id {id} not found",
            status_code=404,
            details={"entity": entity, "id": id}
        )


class ValidationError(BaseError):
    """Exception raised for validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        self.field = field
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )


class PayloadValidationError(BaseError):
    """Exception raised when a whole payload fails schema validation.

    ``errors`` holds ``{"field": ..., "message": ...}`` entries in the order
    the schema reported them.
    """

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        super().__init__(
            message="Validation error",
            status_code=400,
            details={"errors": errors}
        )


class ExternalServiceError(BaseError):
    """Exception raised when external service fails"""

    def __init__(self, service: str, message: str):
        super().__init__(
            message=f"External service error: {message}",
            status_code=503,
            details={"service": service}
        )


class WebhookDeliveryError(ExternalServiceError):
    """Raised when the forwarding target answers with a non-success status"""

    def __init__(self, status_code: int, body: str):
        self.response_status = status_code
        self.body = body
        self.reason = f"Webhook failed: {status_code} - {body}"
        super().__init__("webhook", self.reason)
