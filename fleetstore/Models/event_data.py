# fleetstore/Models/event_data.py

"""
EventData Model - Device Telemetry Timeline

One row per telemetry event. The primary key is the 4-tuple
(accountID, deviceID, timestamp, statusCode): two events in the same
second with different status codes are distinct records, while writing
the same 4-tuple twice overwrites the first row.

Database Table: eventdata
"""

from sqlalchemy import (
    Column, String, Integer, BigInteger, Float, DateTime, JSON,
    ForeignKeyConstraint, Index, and_, or_
)
from sqlalchemy.sql import func
from fleetstore.DB.base_class import Base


def is_valid_lat_lon(latitude, longitude) -> bool:
    """Within range and not the (0,0) origin placeholder."""
    if latitude is None or longitude is None:
        return False
    if not (-90.0 <= latitude <= 90.0) or not (-180.0 <= longitude <= 180.0):
        return False
    return not (latitude == 0.0 and longitude == 0.0)


class EventData(Base):
    """
    SQLAlchemy model storing one device event.

    Besides the mapped columns, each instance memoizes its previous/next
    event lookups (see get_previous_event/get_next_event). The memo lives
    only as long as the instance and is never shared.
    """

    # ============================================================
    # Primary Key
    # ============================================================
    accountID = Column(String(32), primary_key=True)
    deviceID = Column(String(32), primary_key=True)
    timestamp = Column(BigInteger, primary_key=True, doc="Unix seconds")
    statusCode = Column(Integer, primary_key=True, doc="Event classification code")

    # ============================================================
    # Location
    # ============================================================
    latitude = Column(Float, default=0.0, nullable=False)
    longitude = Column(Float, default=0.0, nullable=False)
    cellLatitude = Column(Float, nullable=True, doc="Cell-tower derived latitude")
    cellLongitude = Column(Float, nullable=True, doc="Cell-tower derived longitude")
    altitude = Column(Float, default=0.0, nullable=False)

    # ============================================================
    # Motion
    # ============================================================
    speedKPH = Column(Float, default=0.0, nullable=False)
    heading = Column(Float, default=0.0, nullable=False)
    odometerKM = Column(Float, default=0.0, nullable=False)
    distanceKM = Column(Float, default=0.0, nullable=False)

    address = Column(String(256), nullable=True)
    properties = Column(
        JSON,
        nullable=True,
        doc="Extra string-keyed values reported by the device"
    )

    creationTime = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        ForeignKeyConstraint(
            ["accountID", "deviceID"],
            ["device.accountID", "device.deviceID"],
            name="fk_eventdata_device",
            ondelete="CASCADE"
        ),
        Index("idx_eventdata_device_time", "accountID", "deviceID", "timestamp"),
    )

    # ============================================================
    # GPS validity
    # ============================================================

    def is_valid_gps(self) -> bool:
        return is_valid_lat_lon(self.latitude, self.longitude)

    def is_valid_cell(self) -> bool:
        return is_valid_lat_lon(self.cellLatitude, self.cellLongitude)

    def is_gps_or_cell_valid(self) -> bool:
        return self.is_valid_gps() or self.is_valid_cell()

    @classmethod
    def valid_gps_clause(cls):
        """
        SQL predicate: at least one non-origin location source.

        GPS location not (0,0), or the cell-tower location present and
        not (0,0).
        """
        gps_ok = or_(cls.latitude != 0.0, cls.longitude != 0.0)
        cell_ok = and_(
            cls.cellLatitude.isnot(None),
            cls.cellLongitude.isnot(None),
            or_(cls.cellLatitude != 0.0, cls.cellLongitude != 0.0)
        )
        return or_(gps_ok, cell_ok)

    # ============================================================
    # Extra properties
    # ============================================================

    def get_property(self, key: str, default=None):
        props = self.properties or {}
        return props.get(key, default)

    def set_property(self, key: str, value) -> None:
        # reassign so the JSON column is flagged dirty
        props = dict(self.properties or {})
        props[key] = value
        self.properties = props

    # ============================================================
    # Previous / next navigation
    # ============================================================

    def _navigation_memo(self) -> dict:
        memo = getattr(self, "_navigation_cache", None)
        if memo is None:
            memo = {}
            self._navigation_cache = memo
        return memo

    def get_previous_event(self, db, status_codes=None, require_valid_gps: bool = False):
        """
        Latest event of the same device strictly before this one.

        Unfiltered lookups are memoized on this instance (one slot for any
        GPS, one for valid GPS only). Lookups with explicit status codes
        always query.
        """
        from fleetstore.Repositories import event_data as event_repo

        if status_codes:
            return event_repo.get_previous_event(
                db, self.accountID, self.deviceID, self.timestamp,
                status_codes=status_codes, valid_gps=require_valid_gps
            )

        memo = self._navigation_memo()
        key = ("previous", bool(require_valid_gps))
        if key not in memo:
            memo[key] = event_repo.get_previous_event(
                db, self.accountID, self.deviceID, self.timestamp,
                valid_gps=require_valid_gps
            )
        return memo[key]

    def get_next_event(self, db, require_valid_gps: bool = False):
        """Earliest event of the same device strictly after this one (memoized)."""
        from fleetstore.Repositories import event_data as event_repo

        memo = self._navigation_memo()
        key = ("next", bool(require_valid_gps))
        if key not in memo:
            memo[key] = event_repo.get_next_event(
                db, self.accountID, self.deviceID, self.timestamp,
                valid_gps=require_valid_gps
            )
        return memo[key]

    def clear_navigation_cache(self) -> None:
        self._navigation_cache = None

    def __repr__(self) -> str:
        return (
            f"<EventData({self.accountID}/{self.deviceID} t={self.timestamp} "
            f"sc={self.statusCode} lat={self.latitude!r} lon={self.longitude!r})>"
        )
