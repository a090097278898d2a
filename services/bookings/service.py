"""Booking rules applied before any mutation reaches the store."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Union

from common.errors import Rejection, RejectionCode
from common.schemas import Booking, BookingDeletionResult, parse_instant
from common.store import BookingStore, Clock, utc_now

logger = logging.getLogger(__name__)

TimeValue = Union[str, datetime]


class BookingService:
    """Stateless rule-applier over a ``BookingStore``.

    Rejections are returned, never raised, so callers branch on the result
    type: ``Booking``/``BookingDeletionResult`` on success, ``Rejection``
    otherwise.
    """

    def __init__(self, store: BookingStore, clock: Clock = utc_now) -> None:
        self.store = store
        self._clock = clock

    def list_bookings(self, room_id: str) -> List[Booking]:
        return self.store.list(room_id)

    def request_booking(
        self, room_id: str, start_time: TimeValue, end_time: TimeValue
    ) -> Union[Booking, Rejection]:
        try:
            start = parse_instant(start_time)
            end = parse_instant(end_time)
        except ValueError as exc:
            logger.info("Rejected booking for room %s: %s", room_id, exc)
            return Rejection.of(RejectionCode.INVALID_TIME)

        if start >= end:
            return self._reject(room_id, RejectionCode.INVALID_INTERVAL)
        if start <= self._clock():
            return self._reject(room_id, RejectionCode.PAST_BOOKING)

        with self.store.room_lock(room_id):
            if any(existing.overlaps(start, end) for existing in self.store.list(room_id)):
                return self._reject(room_id, RejectionCode.BOOKING_CONFLICT)
            booking = self.store.create(room_id, start, end)

        logger.info("Created booking %s for room %s", booking.id, room_id)
        return booking

    def cancel_booking(self, room_id: str, booking_id: str) -> Union[BookingDeletionResult, Rejection]:
        result = self.store.delete(room_id, booking_id)
        if result is None:
            return self._reject(room_id, RejectionCode.NOT_FOUND)
        logger.info("Cancelled booking %s for room %s", booking_id, room_id)
        return result

    @staticmethod
    def _reject(room_id: str, code: RejectionCode) -> Rejection:
        logger.info("Rejected request for room %s: %s", room_id, code.value)
        return Rejection.of(code)
