# tests/conftest.py

"""
Shared fixtures: an isolated in-memory SQLite database per test, a fake
clock that records pauses, and a seeded account with three devices.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from fleetstore.DB.database import create_all_tables, drop_all_tables
from fleetstore.DB.session import build_session_factory
from fleetstore.Models.account import Account
from fleetstore.Models.device import Device
from fleetstore.Models.event_data import EventData


class FakeClock:
    """
    Deterministic clock.

    now_ms() advances by step_ms on every call, so each timed section of a
    sweep appears to take step_ms. sleep() only records the pause.
    """

    def __init__(self, now_sec: int = 1_000, step_ms: int = 0):
        self.now = now_sec
        self.ms = now_sec * 1000
        self.step_ms = step_ms
        self.sleeps = []

    def now_sec(self) -> int:
        return self.now

    def now_ms(self) -> int:
        value = self.ms
        self.ms += self.step_ms
        return value

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    create_all_tables(bind=engine)
    yield engine
    drop_all_tables(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def account(db):
    """Account "acme" with devices d1, d2, d3 and no retention minimum."""
    acct = Account(accountID="acme", description="Acme Logistics")
    db.add(acct)
    for device_id in ("d1", "d2", "d3"):
        db.add(Device(accountID="acme", deviceID=device_id))
    db.commit()
    return acct


@pytest.fixture
def add_events(db):
    """
    Insert events and commit.

    Each item is (device_id, timestamp) or
    (device_id, timestamp, status_code, latitude, longitude).
    """
    def _add(rows, account_id="acme"):
        for row in rows:
            device_id, timestamp = row[0], row[1]
            status_code = row[2] if len(row) > 2 else 1
            latitude = row[3] if len(row) > 3 else 10.0
            longitude = row[4] if len(row) > 4 else -74.0
            db.add(EventData(
                accountID=account_id,
                deviceID=device_id,
                timestamp=timestamp,
                statusCode=status_code,
                latitude=latitude,
                longitude=longitude
            ))
        db.commit()

    return _add
