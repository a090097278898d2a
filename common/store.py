"""In-memory booking store partitioned by room."""
from __future__ import annotations

import threading
import uuid
import zlib
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional

from .schemas import Booking, BookingDeletionResult

Clock = Callable[[], datetime]

DEFAULT_LOCK_STRIPES = 64


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_booking_id() -> str:
    return str(uuid.uuid4())


class BookingStore:
    """Authoritative keeper of bookings, keyed by room id.

    The store applies no business rules. Rooms map onto a fixed pool of
    re-entrant locks by a stable hash of the room id, so every request for a
    room serializes on the same lock while memory stays bounded however many
    room ids are named. ``create`` and ``delete`` take the room's lock, and
    callers that need a read-check-write sequence to be atomic hold it
    through ``room_lock``.
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = new_booking_id,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
    ) -> None:
        if lock_stripes < 1:
            raise ValueError("lock_stripes must be at least 1")
        self._clock = clock
        self._id_factory = id_factory
        self._bookings: Dict[str, List[Booking]] = {}
        self._locks = tuple(threading.RLock() for _ in range(lock_stripes))
        self._registry_lock = threading.Lock()

    def _lock_for(self, room_id: str):
        return self._locks[zlib.crc32(room_id.encode("utf-8")) % len(self._locks)]

    @contextmanager
    def room_lock(self, room_id: str) -> Iterator[None]:
        with self._lock_for(room_id):
            yield

    def rooms(self) -> List[str]:
        with self._registry_lock:
            return list(self._bookings)

    def list(self, room_id: str) -> List[Booking]:
        with self.room_lock(room_id):
            return list(self._bookings.get(room_id, ()))

    def create(self, room_id: str, start_time: datetime, end_time: datetime) -> Booking:
        booking = Booking(
            id=self._id_factory(),
            room_id=room_id,
            start_time=start_time,
            end_time=end_time,
            created_at=self._clock(),
        )
        with self.room_lock(room_id):
            with self._registry_lock:
                bookings = self._bookings.setdefault(room_id, [])
            bookings.append(booking)
        return booking

    def delete(self, room_id: str, booking_id: str) -> Optional[BookingDeletionResult]:
        with self.room_lock(room_id):
            bookings = self._bookings.get(room_id)
            if not bookings:
                return None
            for index, booking in enumerate(bookings):
                if booking.id == booking_id:
                    break
            else:
                return None
            del bookings[index]
            if not bookings:
                with self._registry_lock:
                    del self._bookings[room_id]
        return BookingDeletionResult(id=booking_id, deleted_at=self._clock())
