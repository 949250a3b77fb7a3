from .base import IRepository, BaseService, IService
from .exceptions import (
    BaseError,
    NotFoundError,
    ValidationError,
    PayloadValidationError,
    ExternalServiceError,
    WebhookDeliveryError
)
from .config import Settings, get_settings

__all__ = [
    # Base classes
    "IRepository",
    "BaseService",
    "IService",

    # Exceptions
    "BaseError",
    "NotFoundError",
    "ValidationError",
    "PayloadValidationError",
    "ExternalServiceError",
    "WebhookDeliveryError",

    # Config
    "Settings",
    "get_settings"
]
