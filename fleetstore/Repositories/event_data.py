# fleetstore/Repositories/event_data.py

"""
EventData Repository Module

Record-store access for device event timelines.

Responsibilities:
- Execute RangePlans (select, count) and return events in the requested order
- Point lookups: first/last event, previous/next event around a timestamp
- Unfiltered record counts used by retention planning
- Bulk delete of events older than a cutoff
- Upsert of single events (the 4-tuple key collapses duplicates)

Counts and deletes return RecordCount so that "zero rows" and "the engine
could not tell" stay distinguishable. Every SQLAlchemy failure surfaces as
StoreUnavailable; nothing here retries.

Usage:
    from fleetstore.Repositories import event_data as event_repo

    events = event_repo.get_range_events(
        db, "acme", "truck-01", time_start, time_end,
        limit=10, limit_type=LimitType.LAST
    )
"""

from typing import Iterable, Iterator, List, Optional
from sqlalchemy import select, delete, func
from sqlalchemy.orm import Session
from fleetstore.Core.record_count import RecordCount
from fleetstore.DB.transaction import store_errors
from fleetstore.Models.event_data import EventData
from fleetstore.Schemas.event_data import EventData_create
from fleetstore.Services.range_selector import (
    LimitType, RangePlan, build_range_plan
)


# ==========================================================
# 📌 PLAN EXECUTION
# ==========================================================

def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _reverse_in_place(events: List[EventData]) -> List[EventData]:
    """Swap from both ends toward the middle."""
    i, j = 0, len(events) - 1
    while i < j:
        events[i], events[j] = events[j], events[i]
        i += 1
        j -= 1
    return events


def _select_for_plan(plan: RangePlan):
    stmt = (
        select(EventData)
        .where(*plan.where(EventData))
        .order_by(*plan.order_by(EventData))
    )
    if plan.has_limit:
        stmt = stmt.limit(plan.limit)
    return stmt


def get_events_for_plan(db: Session, plan: Optional[RangePlan]) -> List[EventData]:
    """
    Execute a plan and return its events in the requested order.

    Returns an empty list for a None plan. When the plan scanned in the
    opposite direction (bounded LAST queries), the rows are reversed here.
    """
    if plan is None:
        return []

    with store_errors("select events"):
        events = list(db.execute(_select_for_plan(plan)).scalars().all())

    if plan.reverse_result:
        _reverse_in_place(events)
    return events


def count_events_for_plan(
    db: Session,
    plan: Optional[RangePlan],
    exact_count: bool = True
) -> RecordCount:
    """
    Count rows matching a plan (limit caps the count).

    exact_count=False models storage engines that cannot count a range
    without a full scan: the query is skipped and the result is unknown.
    """
    if plan is None:
        return RecordCount.exact(0)
    if not exact_count:
        return RecordCount.unsupported()

    stmt = select(func.count()).select_from(EventData).where(*plan.where(EventData))
    with store_errors("count events"):
        count = db.execute(stmt).scalar_one()

    if plan.has_limit and count > plan.limit:
        count = plan.limit
    return RecordCount.exact(count)


# ==========================================================
# 📌 RANGE RETRIEVAL
# ==========================================================

def get_range_events(
    db: Session,
    account_id: str,
    device_id: str,
    time_start: int,
    time_end: int,
    status_codes: Optional[Iterable[int]] = None,
    valid_gps: bool = False,
    limit_type: LimitType = LimitType.FIRST,
    limit: int = -1,
    ascending: bool = True
) -> List[EventData]:
    """
    Retrieve events for one device (or "*" for every device of the account).

    Args:
        db: SQLAlchemy session
        account_id: Owning account
        device_id: Device id, or "*" for all devices of the account
        time_start: Inclusive lower bound, negative for none
        time_end: Inclusive upper bound, negative for none
        status_codes: Acceptable status codes, empty for any
        valid_gps: Exclude events without a non-origin location
        limit_type: FIRST keeps the earliest rows, LAST the latest
        limit: Maximum rows, <= 0 for unlimited
        ascending: Order of the returned list

    Returns:
        list[EventData]: Never None; empty on invalid input or no match

    Example:
        >>> last_five = get_range_events(db, "acme", "truck-01", -1, -1,
        ...                              limit_type=LimitType.LAST, limit=5)
    """
    plan = build_range_plan(
        account_id, device_id, time_start, time_end,
        status_codes=status_codes, valid_gps=valid_gps,
        limit=limit, limit_type=limit_type, ascending=ascending
    )
    return get_events_for_plan(db, plan)


def iterate_range_events(
    db: Session,
    account_id: str,
    device_id: str,
    time_start: int,
    time_end: int,
    status_codes: Optional[Iterable[int]] = None,
    valid_gps: bool = False,
    ascending: bool = True,
    batch_size: int = 500
) -> Iterator[EventData]:
    """
    Stream events lazily, batch_size rows per round-trip.

    Only the rows of the current batch are held in memory, so arbitrarily
    long device histories can be scanned.
    """
    plan = build_range_plan(
        account_id, device_id, time_start, time_end,
        status_codes=status_codes, valid_gps=valid_gps, ascending=ascending
    )
    if plan is None:
        return

    stmt = _select_for_plan(plan).execution_options(yield_per=max(1, batch_size))
    with store_errors("stream events"):
        for event in db.execute(stmt).scalars():
            yield event


def count_range_events(
    db: Session,
    account_id: str,
    device_id: str,
    time_start: int,
    time_end: int,
    status_codes: Optional[Iterable[int]] = None,
    valid_gps: bool = False,
    limit: int = -1,
    exact_count: bool = True
) -> RecordCount:
    """
    Count events with the same filter semantics as get_range_events.

    Returns:
        RecordCount: exact count, or unsupported when the engine cannot count
    """
    plan = build_range_plan(
        account_id, device_id, time_start, time_end,
        status_codes=status_codes, valid_gps=valid_gps, limit=limit
    )
    return count_events_for_plan(db, plan, exact_count=exact_count)


def get_record_count(
    db: Session,
    account_id: str,
    device_id: Optional[str],
    time_start: int,
    time_end: int,
    exact_count: bool = True
) -> RecordCount:
    """
    Unfiltered count of events in [time_start, time_end).

    The upper bound is exclusive: get_record_count(db, a, d, -1, cutoff)
    counts exactly the rows a retention delete with that cutoff removes.
    A blank device id counts every device of the account.
    """
    plan = build_range_plan(
        account_id, device_id, time_start, time_end,
        blank_device_means_all=True, end_inclusive=False
    )
    return count_events_for_plan(db, plan, exact_count=exact_count)


# ==========================================================
# 📌 POINT LOOKUPS
# ==========================================================

def _first_or_none(db: Session, plan: Optional[RangePlan]) -> Optional[EventData]:
    events = get_events_for_plan(db, plan)
    return events[0] if events else None


def get_first_event(
    db: Session,
    account_id: str,
    device_id: str,
    valid_gps: bool = False
) -> Optional[EventData]:
    """Earliest event of a device, or None."""
    plan = build_range_plan(
        account_id, device_id, -1, -1, valid_gps=valid_gps,
        limit=1, limit_type=LimitType.FIRST, ascending=True
    )
    return _first_or_none(db, plan)


def get_last_event(
    db: Session,
    account_id: str,
    device_id: str,
    valid_gps: bool = False
) -> Optional[EventData]:
    """Most recent event of a device, or None."""
    plan = build_range_plan(
        account_id, device_id, -1, -1, valid_gps=valid_gps,
        limit=1, limit_type=LimitType.LAST, ascending=True
    )
    return _first_or_none(db, plan)


def get_previous_event(
    db: Session,
    account_id: str,
    device_id: str,
    timestamp: int,
    status_codes: Optional[Iterable[int]] = None,
    valid_gps: bool = False
) -> Optional[EventData]:
    """Latest event strictly before timestamp."""
    plan = build_range_plan(
        account_id, device_id, -1, timestamp,
        status_codes=status_codes, valid_gps=valid_gps,
        limit=1, limit_type=LimitType.LAST, ascending=True,
        end_inclusive=False
    )
    return _first_or_none(db, plan)


def get_next_event(
    db: Session,
    account_id: str,
    device_id: str,
    timestamp: int,
    status_codes: Optional[Iterable[int]] = None,
    valid_gps: bool = False
) -> Optional[EventData]:
    """Earliest event strictly after timestamp."""
    plan = build_range_plan(
        account_id, device_id, timestamp, -1,
        status_codes=status_codes, valid_gps=valid_gps,
        limit=1, limit_type=LimitType.FIRST, ascending=True,
        start_inclusive=False
    )
    return _first_or_none(db, plan)


def get_event(
    db: Session,
    account_id: str,
    device_id: str,
    timestamp: int,
    status_code: int
) -> Optional[EventData]:
    """Fetch one event by its full primary key."""
    with store_errors("get event"):
        return db.get(EventData, (_norm(account_id), _norm(device_id), timestamp, status_code))


# ==========================================================
# 📌 WRITES
# ==========================================================

def save_event(db: Session, event: EventData_create) -> EventData:
    """
    Insert or overwrite an event by its (account, device, timestamp, status) key.

    Example:
        >>> save_event(db, EventData_create(accountID="acme", deviceID="truck-01",
        ...                                 timestamp=100, statusCode=1))
    """
    row = EventData(**event.model_dump())
    row.accountID, row.deviceID = _norm(row.accountID), _norm(row.deviceID)
    with store_errors("save event"):
        merged = db.merge(row)
        db.commit()
        db.refresh(merged)
    return merged


def delete_events_before(
    db: Session,
    account_id: str,
    device_id: str,
    cutoff: int
) -> RecordCount:
    """
    Bulk-delete one device's events with timestamp < cutoff.

    Does not commit: callers run it inside DB.transaction.transaction().

    Returns:
        RecordCount: rows reported by the driver, unsupported if it reports -1
    """
    account_id, device_id = _norm(account_id), _norm(device_id)
    if not account_id or not device_id or cutoff is None or cutoff < 1:
        return RecordCount.exact(0)

    stmt = (
        delete(EventData)
        .where(
            EventData.accountID == account_id,
            EventData.deviceID == device_id,
            EventData.timestamp < cutoff
        )
        .execution_options(synchronize_session=False)
    )
    with store_errors("delete events"):
        result = db.execute(stmt)
    return RecordCount.from_rowcount(result.rowcount)
