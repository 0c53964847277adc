"""
fleetstore/DB/session.py
======================================
Database Session Configuration Module
======================================

Establishes the SQLAlchemy engine and session factory for the process.

Architecture:
------------
- Engine: Manages the database connection pool and dialect
- SessionLocal: Factory for creating database sessions
- build_session_factory(): Builds an independent engine/factory pair for
  a given URL (used by tests and tooling that target another database)

Usage Example:
-------------
    from fleetstore.DB.session import SessionLocal

    with SessionLocal() as db:
        events = event_repo.get_range_events(db, "acme", "truck-01", -1, -1)

Session Configuration:
---------------------
- autocommit=False: Transactions must be explicitly committed
- autoflush=False: Changes are not flushed automatically before queries
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from fleetstore.Core.config import settings


def build_engine(database_url: str, **kwargs) -> Engine:
    """
    Create an engine for the given URL.

    pool_pre_ping keeps long-idle pooled connections from failing the
    first query of a retention sweep.
    """
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine
    )


# ============================================================
# DATABASE ENGINE CONFIGURATION
# ============================================================
engine = build_engine(settings.DATABASE_URL)


# ============================================================
# SESSION FACTORY CONFIGURATION
# ============================================================
SessionLocal = build_session_factory(engine)
