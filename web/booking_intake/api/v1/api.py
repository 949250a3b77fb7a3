from fastapi import APIRouter

from booking_intake.api.v1.endpoints import travel_booking, pages


# Create main API router
api_v1_router = APIRouter()

# Include travel booking endpoints (public access)
api_v1_router.include_router(
    travel_booking.router,
    tags=["travel-booking"]
)

# Server-rendered pages, mounted at the application root
pages_router = APIRouter()

pages_router.include_router(
    pages.router,
    tags=["pages"]
)
