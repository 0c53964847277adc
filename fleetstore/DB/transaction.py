# fleetstore/DB/transaction.py

"""
Unit-of-work helpers shared by repositories and services.

Kept apart from database.py so that importing a repository never creates
the process-wide engine.
"""

from contextlib import contextmanager
from typing import Iterator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fleetstore.Core.errors import StoreUnavailable


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """
    Re-raise any SQLAlchemy error as StoreUnavailable.

    Example:
        with store_errors("count events"):
            n = db.execute(stmt).scalar_one()
    """
    try:
        yield
    except SQLAlchemyError as e:
        raise StoreUnavailable(operation, str(e)) from e


@contextmanager
def transaction(db: Session, operation: str = "transaction") -> Iterator[Session]:
    """
    Run a unit of work and commit it, rolling back on any error.

    Scoped to the smallest read-then-write sequence that must be atomic
    (one device's count+delete pair), never to a whole group sweep.

    Raises:
        StoreUnavailable: if the commit itself fails
    """
    try:
        yield db
    except BaseException:
        db.rollback()
        raise
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreUnavailable(operation, str(e)) from e
