from __future__ import annotations

import copy
from typing import Callable, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from booking_intake.core.config import Settings
from booking_intake.infrastructure.repositories import InMemoryBookingRepository
from booking_intake.main import create_app

WEBHOOK_URL = "https://hooks.example.test/webhook/travel"

_SETTINGS_ENV = (
    "N8N_WEBHOOK_URL",
    "WEBHOOK_URL",
    "WEBHOOK_TIMEOUT",
    "HOST",
    "PORT",
    "APP_ENV",
    "CORS_ALLOW_ORIGINS",
    "RATE_LIMIT_DEFAULT",
    "FORM_VARIANT",
    "LOG_LEVEL",
)

BOOKING_PAYLOAD = {
    "starting_date": "2024-12-25",
    "meals_provided": True,
    "flight_information": "SQ123",
    "tour_fair_includes": ["x"],
    "tour_fair_excludes": ["y"],
    "uploaded_file": {
        "filename": "a.pdf",
        "size": 100,
        "type": "application/pdf",
        "data": "QQ==",
    },
    "file_size_limit_enabled": True,
    "itinerary_language": "English",
}


@pytest.fixture
def settings_factory(monkeypatch) -> Callable[..., Settings]:
    def factory(**env: str) -> Settings:
        for key in _SETTINGS_ENV:
            monkeypatch.delenv(key, raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return Settings()

    return factory


@pytest.fixture
def booking_payload() -> dict:
    return copy.deepcopy(BOOKING_PAYLOAD)


@pytest.fixture
def repository() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def app_factory(settings_factory, repository):
    def factory(webhook_handler: Optional[Callable[[httpx.Request], httpx.Response]] = None, **env: str):
        transport = httpx.MockTransport(webhook_handler) if webhook_handler else None
        return create_app(
            settings_factory(**env),
            repository=repository,
            webhook_transport=transport,
        )

    return factory


@pytest.fixture
def client(app_factory) -> TestClient:
    return TestClient(app_factory())
