"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Rate limiting
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .core import BaseError, Settings, get_settings
from .api.v1.api import api_v1_router, pages_router
from .api.v1.middleware import (
    base_error_handler,
    unexpected_error_handler,
    validation_exception_handler,
)
from .infrastructure.repositories import IBookingRepository, InMemoryBookingRepository
from .services.webhook_service import WebhookService

load_dotenv()  # allow local development with a .env file

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings: Settings = app.state.settings
    if settings.webhook_configured:
        logger.info("Forwarding travel bookings to configured webhook")
    else:
        logger.warning("No webhook URL configured; bookings are accepted without forwarding")
    yield
    logger.info("Shutting down")


def create_app(
    settings: Optional[Settings] = None,
    *,
    repository: Optional[IBookingRepository] = None,
    webhook_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use instead of the cached environment settings
        repository: Booking repository; an in-memory one by default
        webhook_transport: httpx transport for the webhook client (tests)
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Travel Booking Intake API",
        description="Travel agency booking form and webhook relay",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )

    app.state.settings = settings
    app.state.repository = repository if repository is not None else InMemoryBookingRepository()
    app.state.webhook = WebhookService(
        settings.WEBHOOK_URL,
        timeout=settings.WEBHOOK_TIMEOUT,
        transport=webhook_transport,
    )

    # Attach rate-limiter
    app.state.limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT_DEFAULT])

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    # Rate limiting
    @app.exception_handler(RateLimitExceeded)
    async def ratelimit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(status_code=429, content={"success": False, "message": "Too many requests"})

    app.add_middleware(SlowAPIMiddleware)

    # Exception handling
    app.add_exception_handler(BaseError, base_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # JSON API, reachable both versioned and at the plain /api prefix
    app.include_router(api_v1_router, prefix="/api/v1")
    app.include_router(api_v1_router, prefix="/api", include_in_schema=False)

    # Form page
    app.include_router(pages_router)

    # Health check
    @app.get("/healthz")
    async def healthz():
        """Health check endpoint."""
        return {
            "status": "ok",
            "webhook": "configured" if settings.webhook_configured else "not configured",
        }

    return app


app = create_app()


def serve() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "booking_intake.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.APP_ENV == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
