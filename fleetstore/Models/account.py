# fleetstore/Models/account.py

"""
Account Model - Device Owner

An Account owns Devices and DeviceGroups, and supplies the account-wide
retained-event-age policy: events younger than that age must never be
removed by a retention sweep, whatever cutoff the caller asks for.

Database Table: account
Primary Key: accountID (String, lower-case)
"""

from sqlalchemy import Column, String, Boolean, BigInteger, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleetstore.DB.base_class import Base


class Account(Base):
    """
    SQLAlchemy model representing an account.

    Schema:
    - accountID (PK): Unique account identifier
    - description: Human-readable account name
    - isActive: Whether the account is active
    - retainedEventAge: Minimum age (seconds) of deletable events; 0 = none
    - timeZone: Display/reporting time zone
    - creationTime: When the account was created
    """

    # ============================================================
    # Primary Key
    # ============================================================
    accountID = Column(
        String(32),
        primary_key=True,
        doc="Unique account identifier (stored lower-case)"
    )

    # ============================================================
    # Account Metadata
    # ============================================================
    description = Column(String(128), nullable=True)
    isActive = Column(Boolean, default=True, nullable=False)
    timeZone = Column(String(32), default="UTC", nullable=False)

    # ============================================================
    # Retention Policy
    # ============================================================
    retainedEventAge = Column(
        BigInteger,
        default=0,
        nullable=False,
        doc="Events younger than this many seconds are never deleted (0 = no minimum)"
    )

    creationTime = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    devices = relationship(
        "Device",
        back_populates="account",
        order_by="Device.deviceID",
        passive_deletes=True
    )

    def get_retained_event_age(self) -> int:
        age = self.retainedEventAge or 0
        return age if age > 0 else 0

    def adjust_retained_event_time(self, old_time_sec: int, now_sec: int) -> int:
        """
        Return the deletion cutoff allowed by the retained-event-age policy.

        If old_time_sec is later than (now - retainedEventAge) the caller's
        cutoff is too aggressive and the policy cutoff is returned instead.
        Otherwise old_time_sec is returned unchanged.

        Example:
            # retainedEventAge = 30 days
            account.adjust_retained_event_time(now, now)  # -> now - 30 days
        """
        age = self.get_retained_event_age()
        if age <= 0:
            return old_time_sec
        retained_time = now_sec - age
        if old_time_sec > retained_time:
            return retained_time
        return old_time_sec

    def __repr__(self) -> str:
        return f"<Account(accountID={self.accountID!r}, isActive={self.isActive})>"
