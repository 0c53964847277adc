# fleetstore/Models/device.py

"""
Device Model - Tracking Unit Registry

A Device belongs to an Account and owns a timeline of EventData rows.
It carries its own retained-event-age (which can only make retention more
conservative than the account's) and the last known odometer/position,
from which DistanceSeed.from_device continues distance accumulation.

Database Table: device
Primary Key: (accountID, deviceID)
"""

from sqlalchemy import (
    Column, String, Boolean, BigInteger, Float, DateTime, ForeignKey
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from fleetstore.DB.base_class import Base


class Device(Base):
    """
    SQLAlchemy model representing a tracking device.

    Schema:
    - accountID (PK, FK): Owning account
    - deviceID (PK): Device identifier unique within the account
    - description: Human-readable name
    - isActive: Whether the device is active
    - retainedEventAge: Device-specific minimum event age (0 = inherit)
    - lastOdometerKM: Last known odometer reading
    - lastValidLatitude/lastValidLongitude: Last valid GPS fix
    - lastGPSTimestamp: Timestamp (Unix seconds) of the last valid fix
    """

    # ============================================================
    # Primary Key
    # ============================================================
    accountID = Column(
        String(32),
        ForeignKey("account.accountID", ondelete="CASCADE"),
        primary_key=True
    )
    deviceID = Column(String(32), primary_key=True)

    # ============================================================
    # Device Metadata
    # ============================================================
    description = Column(String(128), nullable=True)
    isActive = Column(Boolean, default=True, nullable=False)

    retainedEventAge = Column(
        BigInteger,
        default=0,
        nullable=False,
        doc="Device-specific minimum age of deletable events (0 = account policy only)"
    )

    # ============================================================
    # Last Known State
    # ============================================================
    lastOdometerKM = Column(Float, default=0.0, nullable=False)
    lastValidLatitude = Column(Float, default=0.0, nullable=False)
    lastValidLongitude = Column(Float, default=0.0, nullable=False)
    lastGPSTimestamp = Column(BigInteger, default=0, nullable=False)

    creationTime = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    account = relationship("Account", back_populates="devices")

    def adjust_retained_event_time(self, old_time_sec: int, now_sec: int) -> int:
        """
        Apply the device and account retained-event-age policies.

        Returns the earliest (most conservative) of the caller's cutoff,
        the device policy cutoff and the account policy cutoff.
        """
        cutoff = old_time_sec
        age = self.retainedEventAge or 0
        if age > 0:
            cutoff = min(cutoff, now_sec - age)
        if self.account is not None:
            cutoff = self.account.adjust_retained_event_time(cutoff, now_sec)
        return cutoff

    def __repr__(self) -> str:
        return (
            f"<Device(accountID={self.accountID!r}, deviceID={self.deviceID!r}, "
            f"isActive={self.isActive})>"
        )
