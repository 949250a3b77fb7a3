import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from booking_intake.core import IRepository

logger = logging.getLogger(__name__)


class IBookingRepository(IRepository):
    """Travel booking repository interface.

    ``create`` returns the record enriched with ``id`` and ``createdAt``;
    ``get`` returns ``None`` for an unknown id. Nothing else is exposed:
    stored bookings are read-only.
    """


class InMemoryBookingRepository(IBookingRepository):
    """Keeps bookings in a process-local dict for the lifetime of the process"""

    def __init__(self):
        self._bookings: Dict[str, Dict[str, Any]] = {}

    async def create(self, *, obj_in: Dict[str, Any]) -> Dict[str, Any]:
        """Store a copy of the payload under a fresh identifier"""
        booking_id = str(uuid.uuid4())
        record = {
            **copy.deepcopy(obj_in),
            "id": booking_id,
            "createdAt": datetime.now(timezone.utc),
        }
        self._bookings[booking_id] = record
        logger.debug("Stored travel booking %s", booking_id)
        return copy.deepcopy(record)

    async def get(self, id: Any) -> Optional[Dict[str, Any]]:
        """Get booking by ID"""
        record = self._bookings.get(str(id))
        return copy.deepcopy(record) if record is not None else None

    def __len__(self) -> int:
        return len(self._bookings)
