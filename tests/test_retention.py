# tests/test_retention.py

import pytest
from fleetstore.Core.errors import StoreUnavailable
from fleetstore.Core.record_count import RecordCount
from fleetstore.Models.account import Account
from fleetstore.Repositories import account as account_repo
from fleetstore.Repositories import event_data as event_repo
from fleetstore.Services import retention
from fleetstore.Services.retention import (
    RetentionPolicy, RetentionSweeper, count_old_events, delete_old_events
)
from conftest import FakeClock


def _timestamps(db, device_id):
    return [e.timestamp for e in event_repo.get_range_events(db, "acme", device_id, -1, -1)]


def _device(db, device_id):
    return account_repo.get_device(db, "acme", device_id)


# ==========================================================
# Per-device
# ==========================================================

def test_count_then_delete_then_nothing_left(db, account, add_events, clock):
    add_events([("d1", 100), ("d1", 200), ("d1", 300)])
    device = _device(db, "d1")

    assert count_old_events(db, device, 250, clock=clock).count.value == 2

    first = delete_old_events(db, device, 250, clock=clock)
    assert first.count.value == 2
    assert first.last_event_saved is False
    assert _timestamps(db, "d1") == [300]

    second = delete_old_events(db, device, 250, clock=clock)
    assert second.count.value == 0
    assert _timestamps(db, "d1") == [300]


def test_latest_event_is_never_deleted(db, account, add_events, clock):
    add_events([("d1", 100), ("d1", 200), ("d1", 300)])
    result = delete_old_events(db, _device(db, "d1"), clock.now_sec(), clock=clock)

    assert result.last_event_saved is True
    assert result.cutoff == 300
    assert result.count.value == 2
    assert _timestamps(db, "d1") == [300]


def test_lone_event_survives(db, account, add_events, clock):
    add_events([("d1", 100)])
    result = delete_old_events(db, _device(db, "d1"), 5_000, clock=clock)
    assert result.count.value == 0
    assert _timestamps(db, "d1") == [100]


def test_device_without_events(db, account, clock):
    result = delete_old_events(db, _device(db, "d1"), 5_000, clock=clock)
    assert result.count.value == 0
    assert result.message == "no events"


def test_cutoff_is_clamped_to_one(db, account, add_events, clock):
    add_events([("d1", 0), ("d1", 100)])
    result = delete_old_events(db, _device(db, "d1"), -50, clock=clock)
    assert result.cutoff == 1
    assert result.count.value == 1
    assert _timestamps(db, "d1") == [100]


def test_account_retained_age_moves_cutoff_earlier(db, account, add_events):
    clock = FakeClock(now_sec=1_000)
    account.retainedEventAge = 500
    db.commit()
    add_events([("d1", 100), ("d1", 200), ("d1", 600), ("d1", 700)])

    result = delete_old_events(db, _device(db, "d1"), 1_000, clock=clock)
    assert result.used_retained_date is True
    assert result.cutoff == 500
    assert result.count.value == 2
    assert _timestamps(db, "d1") == [600, 700]


def test_device_retained_age(db, account, add_events):
    clock = FakeClock(now_sec=1_000)
    device = _device(db, "d1")
    device.retainedEventAge = 850
    db.commit()
    add_events([("d1", 100), ("d1", 200), ("d1", 300)])

    result = delete_old_events(db, device, 1_000, clock=clock)
    assert result.cutoff == 150
    assert result.count.value == 1
    assert _timestamps(db, "d1") == [200, 300]


def test_uncountable_engine_still_deletes(db, account, add_events, clock):
    add_events([("d1", 100), ("d1", 200), ("d1", 300)])
    lines = []

    result = delete_old_events(db, _device(db, "d1"), 250, clock=clock, exact_count=False, logger=lines.append)
    assert result.count.is_unsupported
    assert _timestamps(db, "d1") == [300]
    assert any("Unable to count" in line for line in lines)


def test_delete_failure_rolls_back(db, account, add_events, clock, monkeypatch):
    add_events([("d1", 100), ("d1", 200), ("d1", 300)])

    def broken_delete(*args, **kwargs):
        raise StoreUnavailable("delete events", "disk I/O error")

    monkeypatch.setattr(retention.event_repo, "delete_events_before", broken_delete)
    with pytest.raises(StoreUnavailable):
        delete_old_events(db, _device(db, "d1"), 250, clock=clock)

    monkeypatch.undo()
    assert _timestamps(db, "d1") == [100, 200, 300]


# ==========================================================
# Policy
# ==========================================================

def test_delete_pause_scales_and_caps():
    policy = RetentionPolicy()
    assert policy.delete_pause(0) == pytest.approx(0.5)
    assert policy.delete_pause(2_000) == pytest.approx(0.8)
    assert policy.delete_pause(60_000) == pytest.approx(5.0)


def test_policy_from_settings():
    class _Settings:
        RETENTION_DELETE_PAUSE_BASE_S = 1.0
        RETENTION_DELETE_PAUSE_FACTOR = 0.2
        RETENTION_DELETE_PAUSE_MAX_S = 3.0
        RETENTION_COUNT_PAUSE_S = 0.25
        EVENT_EXACT_COUNT = False

    policy = RetentionPolicy.from_settings(_Settings())
    assert policy.count_pause_s == 0.25
    assert policy.exact_count is False
    assert policy.delete_pause(100_000) == 3.0


# ==========================================================
# Group / account sweeps
# ==========================================================

@pytest.fixture
def three_devices(add_events):
    add_events([
        ("d1", 100), ("d1", 200), ("d1", 300),
        ("d2", 100), ("d2", 400),
        ("d3", 900),
    ])


def test_sweep_all_devices(db, account, three_devices):
    clock = FakeClock(step_ms=2_000)
    lines = []
    sweeper = RetentionSweeper(RetentionPolicy(), clock=clock, logger=lines.append)

    result = sweeper.delete_old_events(db, account, "all", 250)

    assert result.total.value == 3
    assert result.count_unsupported is False
    assert result.aborted is False
    assert [d.device_id for d in result.devices] == ["d1", "d2", "d3"]
    assert _timestamps(db, "d1") == [300]
    assert _timestamps(db, "d2") == [400]
    assert _timestamps(db, "d3") == [900]

    # one pause between each pair of devices, none after the last
    assert clock.sleeps == [pytest.approx(0.8), pytest.approx(0.8)]
    assert any(line.strip().startswith("[RETENTION]   Total") for line in lines)


def test_delete_pause_is_capped(db, account, three_devices):
    clock = FakeClock(step_ms=60_000)
    RetentionSweeper(RetentionPolicy(), clock=clock).delete_old_events(db, account, "all", 250)
    assert clock.sleeps == [5.0, 5.0]


def test_count_sweep_is_non_destructive(db, account, three_devices):
    clock = FakeClock(step_ms=60_000)
    result = RetentionSweeper(RetentionPolicy(), clock=clock).count_old_events(db, account, "all", 250)

    assert result.total.value == 3
    assert clock.sleeps == [0.5, 0.5]
    assert _timestamps(db, "d1") == [100, 200, 300]


def test_sweep_is_idempotent(db, account, three_devices, clock):
    sweeper = RetentionSweeper(RetentionPolicy(), clock=clock)
    sweeper.delete_old_events(db, account, "all", 500)
    snapshot = [_timestamps(db, d) for d in ("d1", "d2", "d3")]

    again = sweeper.delete_old_events(db, account, "all", 500)
    assert again.total.value == 0
    assert [_timestamps(db, d) for d in ("d1", "d2", "d3")] == snapshot


def test_sweep_stored_group(db, account, three_devices, clock):
    from fleetstore.Repositories import device_group as group_repo
    from fleetstore.Schemas.device_group import DeviceGroup_create

    group_repo.create_device_group(db, "acme", DeviceGroup_create(groupID="north"))
    group_repo.add_device_to_group(db, "acme", "north", "d2")

    result = RetentionSweeper(RetentionPolicy(), clock=clock).delete_old_events(db, account, "north", 250)
    assert result.total.value == 1
    assert _timestamps(db, "d1") == [100, 200, 300]
    assert _timestamps(db, "d2") == [400]
    assert clock.sleeps == []


def test_missing_account_or_empty_group(db, account, clock):
    sweeper = RetentionSweeper(RetentionPolicy(), clock=clock)
    assert sweeper.delete_old_events(db, None, "all", 250).total.value == 0
    assert sweeper.delete_old_events(db, account, "ghost", 250).total.value == 0

    empty = Account(accountID="empty")
    db.add(empty)
    db.commit()
    assert sweeper.count_old_events(db, empty, "all", 250).total.value == 0


def test_uncountable_sweep_reports_unsupported_total(db, account, three_devices, clock):
    sweeper = RetentionSweeper(RetentionPolicy(exact_count=False), clock=clock)
    result = sweeper.delete_old_events(db, account, "all", 250)

    assert result.count_unsupported is True
    assert result.total.is_unsupported
    assert _timestamps(db, "d1") == [300]


def test_device_read_error_aborts_sweep(db, account, three_devices, clock, monkeypatch):
    real_get_device = account_repo.get_device

    def flaky_get_device(db, account_id, device_id):
        if device_id == "d2":
            raise StoreUnavailable("get device", "connection reset")
        return real_get_device(db, account_id, device_id)

    monkeypatch.setattr(retention.account_repo, "get_device", flaky_get_device)
    result = RetentionSweeper(RetentionPolicy(), clock=clock).delete_old_events(db, account, "all", 250)

    assert result.aborted is True
    assert result.total.value == 2
    assert [d.device_id for d in result.devices] == ["d1"]
    assert _timestamps(db, "d2") == [100, 400]


def test_account_retained_age_reported_by_sweep(db, account, three_devices):
    clock = FakeClock(now_sec=1_000)
    account.retainedEventAge = 850
    db.commit()

    result = RetentionSweeper(RetentionPolicy(), clock=clock).delete_old_events_for_account(db, account, 1_000)
    assert result.used_retained_date is True
    assert result.cutoff == 150
    assert result.total.value == 2
    assert _timestamps(db, "d1") == [200, 300]


def test_sweep_schema(db, account, three_devices, clock):
    result = RetentionSweeper(RetentionPolicy(), clock=clock).count_old_events_for_account(db, account, 250)
    schema = result.to_schema()
    assert schema.accountID == "acme"
    assert schema.groupID == "all"
    assert schema.total == 3
    assert [d.count for d in schema.devices] == [2, 1, 0]


def test_no_pause_when_trailing_devices_do_not_resolve(db, account, three_devices, monkeypatch):
    real_get_device = account_repo.get_device

    def get_device_without_d3(db, account_id, device_id):
        if device_id == "d3":
            return None
        return real_get_device(db, account_id, device_id)

    monkeypatch.setattr(retention.account_repo, "get_device", get_device_without_d3)
    clock = FakeClock(step_ms=2_000)
    result = RetentionSweeper(RetentionPolicy(), clock=clock).delete_old_events(db, account, "all", 250)

    assert [d.device_id for d in result.devices] == ["d1", "d2"]
    assert clock.sleeps == [pytest.approx(0.8)]

    clock = FakeClock(step_ms=2_000)
    RetentionSweeper(RetentionPolicy(), clock=clock).count_old_events(db, account, "all", 250)
    assert clock.sleeps == [0.5]


def test_device_retained_age_reported_by_sweep(db, account, three_devices):
    clock = FakeClock(now_sec=1_000)
    _device(db, "d2").retainedEventAge = 700
    db.commit()

    result = RetentionSweeper(RetentionPolicy(), clock=clock).delete_old_events(db, account, "all", 1_000)
    assert result.cutoff == 1_000
    assert result.used_retained_date is True
    assert [d.used_retained_date for d in result.devices] == [False, True, False]
    assert _timestamps(db, "d2") == [400]


def test_partially_uncountable_sweep_keeps_known_total(db, account, three_devices, clock, monkeypatch):
    real_get_record_count = event_repo.get_record_count

    def get_record_count(db, account_id, device_id, *args, **kwargs):
        if device_id == "d2":
            return RecordCount.unsupported()
        return real_get_record_count(db, account_id, device_id, *args, **kwargs)

    monkeypatch.setattr(retention.event_repo, "get_record_count", get_record_count)
    result = RetentionSweeper(RetentionPolicy(), clock=clock).delete_old_events(db, account, "all", 250)

    assert result.count_unsupported is True
    assert result.total == RecordCount.exact(2)
    assert _timestamps(db, "d2") == [400]
