# fleetstore/Controller/Routes/events.py

"""
Event Timeline REST API

Thin wrappers over the range selector, event repository and distance
accumulator.

Endpoints:
- GET  /events/{account_id}/{device_id}            Range query
- GET  /events/{account_id}/{device_id}/count      Range count
- GET  /events/{account_id}/{device_id}/distance   Great-circle distance
- POST /events/                                    Insert/overwrite one event

device_id "*" selects every device of the account (range and count only).

Usage:
    # In main.py
    from fleetstore.Controller.Routes import events
    app.include_router(events.router, prefix="/events", tags=["events"])
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from fleetstore.Controller.deps import get_DB
from fleetstore.Core.config import settings
from fleetstore.Repositories import account as account_repo
from fleetstore.Repositories import event_data as event_repo
from fleetstore.Schemas import event_data as event_schema
from fleetstore.Services.distance_accumulator import DistanceSeed, calculate_report_distance
from fleetstore.Services.range_selector import LimitType

router = APIRouter()


# ==========================================================
# 📌 Writes
# ==========================================================

@router.post("/", response_model=event_schema.EventData_get, status_code=201)
def save_event(event: event_schema.EventData_create, DB: Session = Depends(get_DB)):
    """
    Insert an event, or overwrite the one with the same
    (accountID, deviceID, timestamp, statusCode).

    Raises:
        404: Unknown device
    """
    device = account_repo.require_device(DB, event.accountID, event.deviceID)
    event = event.model_copy(update={"accountID": device.accountID, "deviceID": device.deviceID})
    return event_repo.save_event(DB, event)


# ==========================================================
# 📌 Range Queries
# ==========================================================

@router.get("/{account_id}/{device_id}", response_model=event_schema.EventRange_response)
def get_range_events(
    account_id: str,
    device_id: str,
    start: int = Query(-1, description="Inclusive lower bound (Unix seconds), negative for none"),
    end: int = Query(-1, description="Inclusive upper bound (Unix seconds), negative for none"),
    status_code: Optional[List[int]] = Query(None, description="Repeatable status code filter"),
    valid_gps: bool = Query(False),
    limit: Optional[int] = Query(None, description="Maximum rows, <= 0 for unlimited"),
    limit_type: LimitType = Query(LimitType.FIRST),
    ascending: bool = Query(True),
    DB: Session = Depends(get_DB)
):
    """
    Example:
        GET /events/acme/truck-01?start=1700000000&limit=10&limit_type=last
    """
    account_id, device_id = account_id.strip().lower(), device_id.strip().lower()
    if limit is None:
        limit = settings.DEFAULT_RANGE_LIMIT
    events = event_repo.get_range_events(
        DB, account_id, device_id, start, end,
        status_codes=status_code, valid_gps=valid_gps,
        limit_type=limit_type, limit=limit, ascending=ascending
    )
    return {
        "accountID": account_id,
        "deviceID": device_id,
        "count": len(events),
        "events": [event_schema.EventData_get.model_validate(e) for e in events]
    }


@router.get("/{account_id}/{device_id}/count", response_model=event_schema.EventCount_response)
def count_range_events(
    account_id: str,
    device_id: str,
    start: int = Query(-1),
    end: int = Query(-1),
    status_code: Optional[List[int]] = Query(None),
    valid_gps: bool = Query(False),
    DB: Session = Depends(get_DB)
):
    account_id, device_id = account_id.strip().lower(), device_id.strip().lower()
    count = event_repo.count_range_events(
        DB, account_id, device_id, start, end,
        status_codes=status_code, valid_gps=valid_gps,
        exact_count=settings.EVENT_EXACT_COUNT
    )
    return {
        "accountID": account_id,
        "deviceID": device_id,
        "count": count.value,
        "countSupported": count.is_known
    }


@router.get("/{account_id}/{device_id}/distance", response_model=event_schema.EventDistance_response)
def get_report_distance(
    account_id: str,
    device_id: str,
    start: int = Query(..., description="Inclusive lower bound (Unix seconds)"),
    end: int = Query(..., description="Inclusive upper bound (Unix seconds)"),
    seed_latitude: Optional[float] = Query(None, ge=-90, le=90),
    seed_longitude: Optional[float] = Query(None, ge=-180, le=180),
    seed_odometer_km: float = Query(0.0, ge=0),
    seed_from_device: bool = Query(False, description="Continue from the device's last fix and odometer"),
    DB: Session = Depends(get_DB)
):
    """
    Distance traveled within [start, end], in km.

    A seed point (seed_latitude + seed_longitude) measures the first event
    from that point; seed_odometer_km is added to the total.
    seed_from_device uses the device's stored last fix and odometer instead.

    Raises:
        404: Unknown device
    """
    device = account_repo.require_device(DB, account_id, device_id)
    seed = None
    if seed_from_device:
        seed = DistanceSeed.from_device(device)
    elif seed_latitude is not None and seed_longitude is not None:
        seed = DistanceSeed(seed_latitude, seed_longitude, seed_odometer_km)
    elif seed_odometer_km:
        seed = DistanceSeed(0.0, 0.0, seed_odometer_km)

    distance_km = calculate_report_distance(
        DB, device.accountID, device.deviceID, start, end, seed=seed
    )
    return {
        "accountID": device.accountID,
        "deviceID": device.deviceID,
        "timeStart": start,
        "timeEnd": end,
        "distanceKM": distance_km
    }
