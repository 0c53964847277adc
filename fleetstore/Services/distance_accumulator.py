# fleetstore/Services/distance_accumulator.py

"""
Distance Accumulator

Streaming fold over an ascending, GPS-valid event sequence that sums the
great-circle distance between consecutive points.

- Without a seed, the first event only sets the starting point.
- With a seed, the first event is measured from the seed point and the
  total starts at the seed's odometer value.
- Zero events -> the seed odometer (or 0.0).

Events are consumed one at a time, so a whole device history can be
measured from a lazy iterator without loading it into memory.

Usage:
    from fleetstore.Services.distance_accumulator import calculate_report_distance

    km = calculate_report_distance(db, "acme", "truck-01", day_start, day_end)
"""

from dataclasses import dataclass
from math import radians, sin, cos, sqrt, atan2
from typing import Iterable, Optional, Tuple
from sqlalchemy.orm import Session
from fleetstore.Core.config import settings
from fleetstore.Models.event_data import is_valid_lat_lon
from fleetstore.Repositories import event_data as event_repo


# Mean Earth radius (IUGG)
EARTH_RADIUS_KM = 6371.0088


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in kilometers.

    Formula:
        a = sin²(Δlat/2) + cos(lat1) * cos(lat2) * sin²(Δlon/2)
        c = 2 * atan2(√a, √(1−a))
        d = R * c

    Examples:
        >>> haversine_km(10.5, -74.8, 10.5, -74.8)
        0.0
        >>> round(haversine_km(0.0, 0.0, 0.0, 1.0), 3)
        111.195
    """
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = radians(lat2 - lat1)
    delta_lon = radians(lon2 - lon1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


@dataclass(frozen=True)
class DistanceSeed:
    """Known starting point and odometer value (km)."""
    latitude: float
    longitude: float
    odometer_km: float = 0.0

    @classmethod
    def from_device(cls, device) -> "DistanceSeed":
        """Continue from a device's last valid fix and odometer reading."""
        return cls(
            device.lastValidLatitude or 0.0,
            device.lastValidLongitude or 0.0,
            device.lastOdometerKM or 0.0
        )


class DistanceAccumulator:
    """
    Running great-circle total over points delivered in ascending order.

    Points with an invalid location (missing, out of range, or 0/0) are
    ignored and do not break the chain.
    """

    def __init__(self, seed: Optional[DistanceSeed] = None):
        self._total_km = seed.odometer_km if seed else 0.0
        self._last_point: Optional[Tuple[float, float]] = None
        if seed and is_valid_lat_lon(seed.latitude, seed.longitude):
            self._last_point = (seed.latitude, seed.longitude)
        self.count = 0

    @property
    def total_km(self) -> float:
        return self._total_km

    @property
    def last_point(self) -> Optional[Tuple[float, float]]:
        return self._last_point

    def add_point(self, latitude: float, longitude: float) -> float:
        """
        Accept one point and return the segment length it added.
        """
        if not is_valid_lat_lon(latitude, longitude):
            return 0.0
        segment_km = 0.0
        if self._last_point is not None:
            segment_km = haversine_km(self._last_point[0], self._last_point[1], latitude, longitude)
            self._total_km += segment_km
        self._last_point = (latitude, longitude)
        self.count += 1
        return segment_km

    def add(self, event) -> float:
        """Accept an event (anything with latitude/longitude attributes)."""
        return self.add_point(event.latitude, event.longitude)


def accumulate_distance(events: Iterable, seed: Optional[DistanceSeed] = None) -> float:
    """
    Fold an ascending event sequence into a distance in kilometers.

    Example:
        >>> accumulate_distance([])
        0.0
        >>> accumulate_distance([], DistanceSeed(10.0, -74.0, odometer_km=1520.4))
        1520.4
    """
    accumulator = DistanceAccumulator(seed)
    for event in events:
        accumulator.add(event)
    return accumulator.total_km


def calculate_report_distance(
    db: Session,
    account_id: str,
    device_id: str,
    time_start: int,
    time_end: int,
    seed: Optional[DistanceSeed] = None,
    batch_size: Optional[int] = None
) -> float:
    """
    Distance traveled by a device within [time_start, time_end].

    Streams ascending, GPS-valid events from the store in batches.
    """
    events = event_repo.iterate_range_events(
        db, account_id, device_id, time_start, time_end,
        valid_gps=True,
        ascending=True,
        batch_size=batch_size or settings.EVENT_QUERY_BATCH_SIZE
    )
    return accumulate_distance(events, seed)
