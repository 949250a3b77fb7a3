from typing import Annotated
from fastapi import Depends, Request

from booking_intake.core.config import Settings
from booking_intake.infrastructure.repositories import IBookingRepository
from booking_intake.services.webhook_service import WebhookService
from booking_intake.services.submission_service import SubmissionService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> IBookingRepository:
    return request.app.state.repository


def get_webhook_service(request: Request) -> WebhookService:
    return request.app.state.webhook


def get_submission_service(
    repository: Annotated[IBookingRepository, Depends(get_repository)],
    webhook: Annotated[WebhookService, Depends(get_webhook_service)],
) -> SubmissionService:
    return SubmissionService(repository, webhook)


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]
