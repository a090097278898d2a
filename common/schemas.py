"""Pydantic schemas and timestamp helpers for the bookings API."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Annotated, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

ISO_DATETIME_PATTERN = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"
_ISO_DATETIME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?Z$")

IsoDateTimeString = Annotated[
    str,
    Field(min_length=1, pattern=ISO_DATETIME_PATTERN, examples=["2999-01-01T10:00:00Z"]),
]


def _to_milliseconds(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def parse_instant(value: Union[str, datetime]) -> datetime:
    """Parse an ISO 8601 UTC string (or aware datetime) into a UTC datetime.

    Instants are kept at millisecond precision, the precision they have on
    the wire, so intervals that touch as rendered also touch when compared.

    Raises ``ValueError`` for anything that is not a real UTC instant:
    strings not matching ``ISO_DATETIME_PATTERN``, impossible calendar values
    such as month 13, and naive datetimes.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("datetime must be timezone-aware")
        return _to_milliseconds(value.astimezone(timezone.utc))
    if not isinstance(value, str):
        raise ValueError(f"unsupported time value: {value!r}")

    match = _ISO_DATETIME_RE.match(value)
    if not match:
        raise ValueError(f"not an ISO 8601 UTC date-time: {value!r}")
    whole, fraction = match.groups()
    parsed = datetime.strptime(whole, "%Y-%m-%dT%H:%M:%S")
    # sub-millisecond digits are dropped
    millisecond = int((fraction or "0").ljust(3, "0")[:3])
    return parsed.replace(microsecond=millisecond * 1000, tzinfo=timezone.utc)


def format_instant(value: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    value = value.astimezone(timezone.utc)
    return f"{value.strftime('%Y-%m-%dT%H:%M:%S')}.{value.microsecond // 1000:03d}Z"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel)


class CreateBookingRequest(CamelModel):
    start_time: IsoDateTimeString
    end_time: IsoDateTimeString


class Booking(CamelModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    room_id: str
    start_time: datetime
    end_time: datetime
    created_at: datetime

    @field_serializer("start_time", "end_time", "created_at")
    def serialize_instant(self, value: datetime) -> str:
        return format_instant(value)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open interval test: touching endpoints do not overlap."""
        return start < self.end_time and end > self.start_time


class BookingDeletionResult(CamelModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    deleted_at: datetime

    @field_serializer("deleted_at")
    def serialize_instant(self, value: datetime) -> str:
        return format_instant(value)


class ServicePing(BaseModel):
    status: str
    service: str
