# fleetstore/Services/range_selector.py
"""
Range Selector - query plans over a device timeline.

Responsibilities:
- Translate a logical event query (account, device or all devices, time
  bounds, status codes, GPS requirement, limit, FIRST/LAST, order) into a
  RangePlan
- Decide the physical scan order: a bounded LAST query runs descending so
  the limit is cheap, and the plan records that the result must be
  reversed to restore the requested order
- Reject unusable input (blank account, inverted time range) by returning
  None, never by raising

The plan is pure data. Repositories turn it into SQL with where() and
order_by(); nothing here touches the database.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


ALL_DEVICES = "*"


class LimitType(str, Enum):
    """Which end of an over-full range a bounded query keeps."""
    FIRST = "first"
    LAST = "last"


@dataclass(frozen=True)
class RangePlan:
    """
    Query plan for one range retrieval/count.

    device_id is None when the plan covers every device of the account.
    time_start/time_end are None when unbounded on that side.
    """
    account_id: str
    device_id: Optional[str]
    time_start: Optional[int]
    time_end: Optional[int]
    start_inclusive: bool = True
    end_inclusive: bool = True
    status_codes: Tuple[int, ...] = ()
    valid_gps: bool = False
    limit: int = -1
    limit_type: LimitType = LimitType.FIRST
    ascending: bool = True

    @property
    def has_limit(self) -> bool:
        return self.limit > 0

    @property
    def physical_ascending(self) -> bool:
        """Scan order actually sent to the database."""
        if self.has_limit and self.limit_type == LimitType.LAST:
            return False
        return self.ascending

    @property
    def reverse_result(self) -> bool:
        """True when the fetched rows must be reversed before returning."""
        return self.physical_ascending != self.ascending

    def where(self, model):
        """SQLAlchemy predicates for this plan against the event model."""
        clauses = [model.accountID == self.account_id]
        if self.device_id is not None:
            clauses.append(model.deviceID == self.device_id)
        if self.time_start is not None:
            if self.start_inclusive:
                clauses.append(model.timestamp >= self.time_start)
            else:
                clauses.append(model.timestamp > self.time_start)
        if self.time_end is not None:
            if self.end_inclusive:
                clauses.append(model.timestamp <= self.time_end)
            else:
                clauses.append(model.timestamp < self.time_end)
        if self.status_codes:
            clauses.append(model.statusCode.in_(self.status_codes))
        if self.valid_gps:
            clauses.append(model.valid_gps_clause())
        return clauses

    def order_by(self, model):
        """Ordering clauses for the physical scan."""
        columns = [model.timestamp]
        if self.device_id is None:
            columns.append(model.deviceID)
        columns.append(model.statusCode)
        if self.physical_ascending:
            return [c.asc() for c in columns]
        return [c.desc() for c in columns]


def _normalize_status_codes(status_codes: Optional[Iterable[int]]) -> Tuple[int, ...]:
    if not status_codes:
        return ()
    codes = []
    for code in status_codes:
        if code is None:
            continue
        code = int(code)
        if code not in codes:
            codes.append(code)
    return tuple(codes)


def build_range_plan(
    account_id: Optional[str],
    device_id: Optional[str],
    time_start: int,
    time_end: int,
    status_codes: Optional[Iterable[int]] = None,
    valid_gps: bool = False,
    limit: int = -1,
    limit_type: LimitType = LimitType.FIRST,
    ascending: bool = True,
    blank_device_means_all: bool = False,
    start_inclusive: bool = True,
    end_inclusive: bool = True,
) -> Optional[RangePlan]:
    """
    Build a RangePlan, or None when the query can match nothing.

    Args:
        account_id: Owning account; blank yields None
        device_id: Device id, or "*" for every device of the account.
            A blank device id means "all" only when blank_device_means_all
            is set, otherwise it yields None
        time_start: Lower bound (Unix seconds); negative means unbounded
        time_end: Upper bound (Unix seconds); negative means unbounded
        status_codes: Acceptable status codes (OR); empty means any
        valid_gps: Exclude events without a non-origin location
        limit: Maximum rows; <= 0 means unlimited
        limit_type: Keep the FIRST or LAST rows when over the limit
        ascending: Requested result order by timestamp

    Example:
        >>> plan = build_range_plan("acme", "truck-01", -1, -1, limit=5,
        ...                         limit_type=LimitType.LAST)
        >>> plan.physical_ascending, plan.reverse_result
        (False, True)
    """
    account_id = (account_id or "").strip().lower()
    if not account_id:
        return None

    device_id = (device_id or "").strip().lower()
    if device_id == ALL_DEVICES:
        plan_device = None
    elif not device_id:
        if not blank_device_means_all:
            return None
        plan_device = None
    else:
        plan_device = device_id

    start = time_start if time_start is not None and time_start >= 0 else None
    end = time_end if time_end is not None and time_end >= 0 else None
    if start is not None and end is not None and start > end:
        return None

    if limit is None:
        limit = -1
    if not isinstance(limit_type, LimitType):
        limit_type = LimitType(str(limit_type).lower())

    return RangePlan(
        account_id=account_id,
        device_id=plan_device,
        time_start=start,
        time_end=end,
        start_inclusive=start_inclusive,
        end_inclusive=end_inclusive,
        status_codes=_normalize_status_codes(status_codes),
        valid_gps=bool(valid_gps),
        limit=int(limit),
        limit_type=limit_type,
        ascending=bool(ascending),
    )
