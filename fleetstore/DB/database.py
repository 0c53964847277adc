# fleetstore/DB/database.py

"""
Database Dependency Injection Module

Session lifecycle helpers used by the API, the retention sweeps and the
tests.

Key Features:
- get_db(): session generator compatible with FastAPI Depends()
- transaction(): commit/rollback bracket around one unit of work
  (a device's count+delete pair during a retention sweep)
- test_db_connection(): health probe
- create_all_tables() / drop_all_tables(): development and test setup

Usage Examples:
    # 1. FastAPI Endpoint
    @router.get("/events/{account_id}/{device_id}")
    def list_events(account_id: str, device_id: str, db: Session = Depends(get_db)):
        return event_repo.get_range_events(db, account_id, device_id, -1, -1)

    # 2. Background sweep
    db = next(get_db())
    try:
        sweeper.delete_old_events(db, account, "all", cutoff)
    finally:
        db.close()

Thread Safety:
- Each caller gets its own session; sessions are never shared across
  threads or held across the pause between devices.
"""

from typing import Generator, Optional
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fleetstore.DB.session import SessionLocal, engine
from fleetstore.DB.transaction import store_errors, transaction


# ============================================================
# Primary Database Session Generator
# ============================================================

def get_db() -> Generator[Session, None, None]:
    """
    Database session generator for FastAPI dependency injection.

    The session is NOT automatically committed; writers call commit()
    themselves or run inside transaction().

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============================================================
# Database Health Check Utilities
# ============================================================

def test_db_connection(db: Optional[Session] = None) -> bool:
    """
    Test database connectivity with a simple query.

    Returns:
        bool: True if database is reachable and responsive, False otherwise
    """
    owned = db is None
    if owned:
        db = SessionLocal()
    try:
        return db.execute(text("SELECT 1")).scalar() == 1
    except SQLAlchemyError as e:
        print(f"[DB] ❌ Connection test failed: {e}")
        return False
    finally:
        if owned:
            db.close()


# ============================================================
# Development and Testing Utilities
# ============================================================

def create_all_tables(bind: Optional[Engine] = None):
    """
    Create all tables defined in models.

    WARNING: Only use in development/testing environments.
    In production, use Alembic migrations instead.
    """
    from fleetstore.DB.base import Base
    print("[DB] 🔨 Creating all tables...")
    Base.metadata.create_all(bind=bind or engine)
    print("[DB] ✅ Tables created successfully")


def drop_all_tables(bind: Optional[Engine] = None):
    """
    Drop all tables defined in models.

    WARNING: DESTRUCTIVE OPERATION. All data is permanently lost.
    """
    from fleetstore.DB.base import Base
    print("[DB] 🗑️  Dropping all tables...")
    Base.metadata.drop_all(bind=bind or engine)
    print("[DB] ✅ Tables dropped successfully")


__all__ = [
    "get_db",
    "store_errors",
    "transaction",
    "test_db_connection",
    "create_all_tables",
    "drop_all_tables"
]
