from .repositories import IBookingRepository, InMemoryBookingRepository

__all__ = [
    "IBookingRepository",
    "InMemoryBookingRepository",
]
