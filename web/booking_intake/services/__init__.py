from .webhook_service import WebhookService, DeliveryResult, DeliveryStatus
from .submission_service import SubmissionService, SubmissionOutcome

__all__ = [
    "WebhookService",
    "DeliveryResult",
    "DeliveryStatus",
    "SubmissionService",
    "SubmissionOutcome",
]
