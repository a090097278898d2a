import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "room-bookings-test-logs"))

from common.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from common.store import BookingStore  # noqa: E402
from services.bookings.app import create_app  # noqa: E402
from services.bookings.service import BookingService  # noqa: E402

FIXED_NOW = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for deterministic store and service tests."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> BookingStore:
    return BookingStore(clock=clock)


@pytest.fixture()
def service(store: BookingStore, clock: FakeClock) -> BookingService:
    return BookingService(store, clock=clock)


@pytest.fixture()
def api_store() -> BookingStore:
    return BookingStore()


@pytest.fixture()
def bookings_client(api_store: BookingStore) -> Generator[TestClient, None, None]:
    with TestClient(create_app(api_store)) as client:
        yield client
