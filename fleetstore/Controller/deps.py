# fleetstore/Controller/deps.py

from typing import Generator
from fleetstore.Core.clock import SystemClock
from fleetstore.Core.config import settings
from fleetstore.DB.session import SessionLocal
from fleetstore.Services.retention import RetentionPolicy, RetentionSweeper


def get_DB() -> Generator:
    DB = SessionLocal()
    try:
        yield DB
    finally:
        DB.close()


def get_retention_sweeper() -> RetentionSweeper:
    """Sweeper wired to the process settings, logging to stdout."""
    return RetentionSweeper(
        policy=RetentionPolicy.from_settings(settings),
        clock=SystemClock(),
        logger=print
    )
