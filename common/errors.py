"""Rejection taxonomy shared by the booking service and its HTTP layer."""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class RejectionCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_TIME = "INVALID_TIME"
    INVALID_INTERVAL = "INVALID_INTERVAL"
    PAST_BOOKING = "PAST_BOOKING"
    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    NOT_FOUND = "NOT_FOUND"


DEFAULT_MESSAGES: dict[RejectionCode, str] = {
    RejectionCode.VALIDATION_ERROR: "Request body is invalid",
    RejectionCode.INVALID_TIME: "Invalid date format",
    RejectionCode.INVALID_INTERVAL: "Start time must be before end time",
    RejectionCode.PAST_BOOKING: "Bookings cannot be in the past",
    RejectionCode.BOOKING_CONFLICT: "Booking overlaps with an existing reservation",
    RejectionCode.NOT_FOUND: "Booking not found",
}

STATUS_CODES: dict[RejectionCode, int] = {
    RejectionCode.VALIDATION_ERROR: 400,
    RejectionCode.INVALID_TIME: 400,
    RejectionCode.INVALID_INTERVAL: 400,
    RejectionCode.PAST_BOOKING: 400,
    RejectionCode.BOOKING_CONFLICT: 409,
    RejectionCode.NOT_FOUND: 404,
}


class Rejection(BaseModel):
    """A non-fatal outcome returned instead of a successful result."""

    model_config = ConfigDict(frozen=True)

    code: RejectionCode
    message: str

    @classmethod
    def of(cls, code: RejectionCode, message: str | None = None) -> Rejection:
        return cls(code=code, message=message or DEFAULT_MESSAGES[code])

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.code]
