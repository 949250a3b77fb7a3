from .booking_repository import IBookingRepository, InMemoryBookingRepository

__all__ = [
    "IBookingRepository",
    "InMemoryBookingRepository",
]
