# fleetstore/Services/retention.py
"""
Retention Eraser - deletes events older than a cutoff, device by device.

Responsibilities:
- Resolve the effective cutoff from the caller's request and the
  Account/Device retained-event-age policy (never later than the policy
  allows, never below 1)
- Guarantee that a sweep never removes a device's most recent event
- Count, then bulk-delete, inside one transaction per device
- Degrade gracefully when the storage engine cannot report counts
- Sweep a DeviceGroup (or the whole account) sequentially, pausing between
  devices to bound load on the database

Per-device algorithm:
1. cutoff = policy-adjusted cutoff, clamped to >= 1
2. latest = most recent event; none -> nothing to delete
3. latest.timestamp <= cutoff -> cutoff = latest.timestamp ("last event saved")
4. count events < cutoff; unknown -> warn and continue; zero -> stop
5. delete events < cutoff
6. report the count from step 4 (unknown stays unknown)

Pacing:
- delete sweep: pause = min(BASE + FACTOR * last_delete_seconds, MAX)
- count sweep:  fixed COUNT pause
- pauses fall only between devices that were actually processed
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
from sqlalchemy.orm import Session
from fleetstore.Core.clock import SystemClock
from fleetstore.Core.errors import StoreUnavailable
from fleetstore.Core.record_count import RecordCount
from fleetstore.DB.transaction import transaction
from fleetstore.Models.account import Account
from fleetstore.Models.device import Device
from fleetstore.Models.device_group import DEVICE_GROUP_ALL
from fleetstore.Repositories import account as account_repo
from fleetstore.Repositories import device_group as group_repo
from fleetstore.Repositories import event_data as event_repo
from fleetstore.Schemas.retention import DeviceRetention_get, RetentionSweep_get


Logger = Callable[[str], None]


# ==========================================================
# POLICY
# ==========================================================

@dataclass(frozen=True)
class RetentionPolicy:
    """Pacing and counting behaviour of retention sweeps."""
    delete_pause_base_s: float = 0.5
    delete_pause_factor: float = 0.15
    delete_pause_max_s: float = 5.0
    count_pause_s: float = 0.5
    exact_count: bool = True

    @classmethod
    def from_settings(cls, settings) -> "RetentionPolicy":
        return cls(
            delete_pause_base_s=settings.RETENTION_DELETE_PAUSE_BASE_S,
            delete_pause_factor=settings.RETENTION_DELETE_PAUSE_FACTOR,
            delete_pause_max_s=settings.RETENTION_DELETE_PAUSE_MAX_S,
            count_pause_s=settings.RETENTION_COUNT_PAUSE_S,
            exact_count=settings.EVENT_EXACT_COUNT,
        )

    def delete_pause(self, last_delta_ms: int) -> float:
        """Pause (seconds) after a device delete that took last_delta_ms."""
        pause = self.delete_pause_base_s + self.delete_pause_factor * (max(0, last_delta_ms) / 1000.0)
        return min(pause, self.delete_pause_max_s)


# ==========================================================
# RESULTS
# ==========================================================

@dataclass
class DeviceRetentionResult:
    """Outcome of counting or deleting one device's old events."""
    device_id: str
    count: RecordCount
    cutoff: int
    used_retained_date: bool = False
    last_event_saved: bool = False
    elapsed_ms: int = 0
    message: str = ""

    def to_schema(self) -> DeviceRetention_get:
        return DeviceRetention_get(
            deviceID=self.device_id,
            count=self.count.value,
            elapsedMS=self.elapsed_ms,
            message=self.message
        )


@dataclass
class SweepResult:
    """
    Outcome of a group/account sweep.

    total is unknown only when nothing countable was found and at least
    one device could not be counted; count_unsupported is set whenever any
    device could not be counted, so an exact-looking total is never taken
    at face value.
    """
    account_id: str
    group_id: str
    cutoff: int
    total: RecordCount = field(default_factory=lambda: RecordCount.exact(0))
    count_unsupported: bool = False
    used_retained_date: bool = False
    aborted: bool = False
    devices: List[DeviceRetentionResult] = field(default_factory=list)

    def to_schema(self) -> RetentionSweep_get:
        return RetentionSweep_get(
            accountID=self.account_id,
            groupID=self.group_id,
            cutoff=self.cutoff,
            usedRetainedDate=self.used_retained_date,
            total=self.total.value,
            countUnsupported=self.count_unsupported,
            aborted=self.aborted,
            devices=[d.to_schema() for d in self.devices]
        )


# ==========================================================
# PER-DEVICE OPERATIONS
# ==========================================================

def resolve_cutoff(device: Device, old_time_sec: int, now_sec: int) -> Tuple[int, bool]:
    """
    Apply the retained-event-age policy and clamp to >= 1.

    Returns:
        (cutoff, used_retained_date)
    """
    cutoff = device.adjust_retained_event_time(old_time_sec, now_sec)
    used_retained_date = cutoff != old_time_sec
    if cutoff < 1:
        cutoff = 1
    return cutoff, used_retained_date


def _protected_cutoff(db: Session, device: Device, cutoff: int):
    """
    Move the cutoff back to the latest event when that event is itself old.

    Returns:
        (cutoff, last_event_saved), or None when the device has no events
    """
    latest = event_repo.get_last_event(db, device.accountID, device.deviceID)
    if latest is None:
        return None
    if latest.timestamp <= cutoff:
        return latest.timestamp, True
    return cutoff, False


def count_old_events(
    db: Session,
    device: Device,
    old_time_sec: int,
    clock=None,
    exact_count: bool = True
) -> DeviceRetentionResult:
    """
    Count the events delete_old_events would remove, without deleting.
    """
    clock = clock or SystemClock()
    cutoff, used_retained = resolve_cutoff(device, old_time_sec, clock.now_sec())
    result = DeviceRetentionResult(
        device_id=device.deviceID,
        count=RecordCount.exact(0),
        cutoff=cutoff,
        used_retained_date=used_retained
    )

    with transaction(db, "count old events"):
        protected = _protected_cutoff(db, device, cutoff)
        if protected is None:
            result.message = "no events"
            return result
        result.cutoff, result.last_event_saved = protected
        result.count = event_repo.get_record_count(
            db, device.accountID, device.deviceID, -1, result.cutoff,
            exact_count=exact_count
        )
    if result.last_event_saved:
        result.message = "last event saved"
    return result


def delete_old_events(
    db: Session,
    device: Device,
    old_time_sec: int,
    clock=None,
    exact_count: bool = True,
    logger: Optional[Logger] = None
) -> DeviceRetentionResult:
    """
    Delete one device's events strictly older than the effective cutoff.

    The device's most recent event is never deleted. The count and the
    delete run in a single transaction.

    Returns:
        DeviceRetentionResult whose count is the pre-delete count, or
        unknown when the engine could not count (rows were still deleted)

    Raises:
        StoreUnavailable: if the database fails; the transaction is rolled back

    Example:
        >>> r = delete_old_events(db, device, clock.now_sec() - 90 * 86400)
        >>> r.count.value, r.last_event_saved
        (1520, False)
    """
    clock = clock or SystemClock()
    cutoff, used_retained = resolve_cutoff(device, old_time_sec, clock.now_sec())
    result = DeviceRetentionResult(
        device_id=device.deviceID,
        count=RecordCount.exact(0),
        cutoff=cutoff,
        used_retained_date=used_retained
    )
    notes = []
    if used_retained:
        notes.append("retained-date")

    with transaction(db, "delete old events"):
        protected = _protected_cutoff(db, device, cutoff)
        if protected is None:
            result.message = "no events"
            return result
        result.cutoff, result.last_event_saved = protected
        if result.last_event_saved:
            notes.append("last event saved")

        count = event_repo.get_record_count(
            db, device.accountID, device.deviceID, -1, result.cutoff,
            exact_count=exact_count
        )
        if count.is_unsupported:
            if logger:
                logger(
                    f"[RETENTION] ⚠️  Unable to count events for "
                    f"{device.accountID}/{device.deviceID}, deleting anyway"
                )
        elif count.value == 0:
            notes.append("nothing to delete")
            result.message = ", ".join(notes)
            return result

        deleted = event_repo.delete_events_before(
            db, device.accountID, device.deviceID, result.cutoff
        )
        if count.is_unsupported and deleted.is_known:
            notes.append(f"driver reported {deleted.value} rows")
        result.count = count

    result.message = ", ".join(notes)
    return result


# ==========================================================
# GROUP / ACCOUNT SWEEPS
# ==========================================================

def _device_label(account_id: str, device_id: str) -> str:
    return f"{account_id}/{device_id}".ljust(25)


class RetentionSweeper:
    """
    Sequential retention sweeps over a DeviceGroup or a whole account.

    Devices are processed one at a time on the calling thread. The pause
    between devices is a plain clock.sleep(); callers wanting parallel
    sweeps must fan out themselves.

    Args:
        policy: Pacing and counting behaviour
        clock: Time source and sleeper (SystemClock by default)
        logger: Receives human-readable progress lines; None for silence

    Example:
        sweeper = RetentionSweeper(RetentionPolicy.from_settings(settings), logger=print)
        result = sweeper.delete_old_events(db, account, "all", cutoff)
        if result.count_unsupported:
            print("Some devices could not be counted")
    """

    def __init__(self, policy: Optional[RetentionPolicy] = None, clock=None, logger: Optional[Logger] = None):
        self.policy = policy or RetentionPolicy()
        self.clock = clock or SystemClock()
        self.logger = logger

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger(message)

    def _resolve_group_cutoff(self, account: Account, old_time_sec: int) -> Tuple[int, bool]:
        cutoff = account.adjust_retained_event_time(old_time_sec, self.clock.now_sec())
        used_retained = cutoff != old_time_sec
        if cutoff < 1:
            cutoff = 1
        return cutoff, used_retained

    @staticmethod
    def _finish(result: SweepResult, total: RecordCount) -> SweepResult:
        if total.value <= 0 and result.count_unsupported:
            result.total = RecordCount.unsupported()
        else:
            result.total = total
        return result

    # ------------------------------------------------------------------

    def count_old_events(
        self,
        db: Session,
        account: Optional[Account],
        group_id: str,
        old_time_sec: int
    ) -> SweepResult:
        """
        Count old events of every device in the group (non-destructive).

        Uses a fixed pause between devices.
        """
        group_id = group_id or DEVICE_GROUP_ALL
        if account is None:
            self._log("[RETENTION] Account is null")
            return SweepResult(account_id="", group_id=group_id, cutoff=max(1, old_time_sec))

        account_id = account.accountID
        cutoff, used_retained = self._resolve_group_cutoff(account, old_time_sec)
        result = SweepResult(
            account_id=account_id,
            group_id=group_id,
            cutoff=cutoff,
            used_retained_date=used_retained
        )
        self._log(f"[RETENTION] Counting old events for group {account_id}/{group_id} prior to {cutoff}")

        device_ids = group_repo.get_device_ids_for_group(db, account_id, group_id, include_inactive=True)
        if not device_ids:
            self._log(f"[RETENTION]   No Devices Found: {account_id}/{group_id}")
            return result

        total = RecordCount.exact(0)
        pause = None
        for device_id in device_ids:
            try:
                device = account_repo.get_device(db, account_id, device_id)
            except StoreUnavailable as e:
                self._log(f"[RETENTION] ❌ Unable to read device: {account_id}/{device_id}: {e}")
                result.aborted = True
                break
            if device is None:
                continue
            if pause is not None:
                self.clock.sleep(pause)

            start_ms = self.clock.now_ms()
            device_result = count_old_events(
                db, device, cutoff, clock=self.clock, exact_count=self.policy.exact_count
            )
            device_result.elapsed_ms = self.clock.now_ms() - start_ms
            result.devices.append(device_result)
            result.used_retained_date = result.used_retained_date or device_result.used_retained_date

            if device_result.count.is_unsupported:
                result.count_unsupported = True
                self._log(
                    f"[RETENTION]   Device: {_device_label(account_id, device_id)} - unable to count "
                    f"[{device_result.elapsed_ms}ms]"
                )
            else:
                total = total + device_result.count
                self._log(
                    f"[RETENTION]   Device: {_device_label(account_id, device_id)} - counted "
                    f"{device_result.count.value:>5} [{device_result.elapsed_ms}ms]"
                )

            pause = self.policy.count_pause_s

        if total.value > 0:
            self._log(f"[RETENTION]   Total : {_device_label(account_id, group_id)} - counted {total.value:>5}")
        elif result.count_unsupported:
            self._log(f"[RETENTION]   Unable to determine event counts: {account_id}/{group_id}")
        else:
            self._log(f"[RETENTION]   No Devices with counts greater than zero: {account_id}/{group_id}")
        return self._finish(result, total)

    # ------------------------------------------------------------------

    def delete_old_events(
        self,
        db: Session,
        account: Optional[Account],
        group_id: str,
        old_time_sec: int
    ) -> SweepResult:
        """
        Delete old events of every device in the group.

        A device that cannot be read aborts the sweep; the totals of the
        devices already processed are returned with aborted=True. A failure
        while deleting propagates as StoreUnavailable.
        """
        group_id = group_id or DEVICE_GROUP_ALL
        if account is None:
            self._log("[RETENTION] Account is null")
            return SweepResult(account_id="", group_id=group_id, cutoff=max(1, old_time_sec))

        account_id = account.accountID
        cutoff, used_retained = self._resolve_group_cutoff(account, old_time_sec)
        result = SweepResult(
            account_id=account_id,
            group_id=group_id,
            cutoff=cutoff,
            used_retained_date=used_retained
        )
        self._log(
            f"[RETENTION] Deleting old events for group {account_id}/{group_id} prior to {cutoff}"
            + (" (retained-date)" if used_retained else "")
        )

        device_ids = group_repo.get_device_ids_for_group(db, account_id, group_id, include_inactive=True)
        if not device_ids:
            self._log(f"[RETENTION]   No Devices Found: {account_id}/{group_id}")
            return result

        total = RecordCount.exact(0)
        pause = None
        for device_id in device_ids:
            try:
                device = account_repo.get_device(db, account_id, device_id)
            except StoreUnavailable as e:
                self._log(f"[RETENTION] ❌ Unable to read device: {account_id}/{device_id}: {e}")
                result.aborted = True
                break
            if device is None:
                continue
            if pause is not None:
                self.clock.sleep(pause)

            start_ms = self.clock.now_ms()
            device_result = delete_old_events(
                db, device, cutoff,
                clock=self.clock,
                exact_count=self.policy.exact_count,
                logger=self.logger
            )
            delta_ms = self.clock.now_ms() - start_ms
            device_result.elapsed_ms = delta_ms
            result.devices.append(device_result)
            result.used_retained_date = result.used_retained_date or device_result.used_retained_date

            suffix = f"  {device_result.message}" if device_result.message else ""
            if device_result.count.is_unsupported:
                result.count_unsupported = True
                self._log(
                    f"[RETENTION]   Device: {_device_label(account_id, device_id)} - deleted "
                    f"{'?':>5} (uncountable) [{delta_ms}ms]{suffix}"
                )
            else:
                total = total + device_result.count
                self._log(
                    f"[RETENTION]   Device: {_device_label(account_id, device_id)} - deleted "
                    f"{device_result.count.value:>5} [{delta_ms}ms]{suffix}"
                )

            pause = self.policy.delete_pause(delta_ms)

        self._log(f"[RETENTION]   Total : {_device_label(account_id, group_id)} - deleted {total.value:>5}")
        return self._finish(result, total)

    # ------------------------------------------------------------------

    def count_old_events_for_account(self, db: Session, account: Optional[Account], old_time_sec: int) -> SweepResult:
        return self.count_old_events(db, account, DEVICE_GROUP_ALL, old_time_sec)

    def delete_old_events_for_account(self, db: Session, account: Optional[Account], old_time_sec: int) -> SweepResult:
        return self.delete_old_events(db, account, DEVICE_GROUP_ALL, old_time_sec)
