# tests/test_api.py

import pytest
from fastapi.testclient import TestClient
from fleetstore.Controller.deps import get_DB, get_retention_sweeper
from fleetstore.Controller.Routes import events as events_routes
from fleetstore.Core.errors import StoreUnavailable
from fleetstore.main import app
from fleetstore.Services.retention import RetentionPolicy, RetentionSweeper
from conftest import FakeClock


@pytest.fixture
def client(session_factory, account):
    def override_get_DB():
        DB = session_factory()
        try:
            yield DB
        finally:
            DB.close()

    app.dependency_overrides[get_DB] = override_get_DB
    app.dependency_overrides[get_retention_sweeper] = lambda: RetentionSweeper(
        RetentionPolicy(), clock=FakeClock(now_sec=10_000)
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def _post_event(client, device_id, timestamp, status_code=1, lat=10.0, lon=-74.0):
    return client.post("/events/", json={
        "accountID": "acme",
        "deviceID": device_id,
        "timestamp": timestamp,
        "statusCode": status_code,
        "latitude": lat,
        "longitude": lon,
    })


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_post_and_query_events(client):
    for ts in (100, 200, 300, 400):
        assert _post_event(client, "d1", ts).status_code == 201

    body = client.get("/events/acme/d1", params={"limit": 2, "limit_type": "last"}).json()
    assert body["count"] == 2
    assert [e["timestamp"] for e in body["events"]] == [300, 400]

    body = client.get("/events/acme/d1", params={"start": 150, "end": 300, "ascending": False}).json()
    assert [e["timestamp"] for e in body["events"]] == [300, 200]


def test_post_event_overwrites_same_key(client):
    _post_event(client, "d1", 100, lat=10.0)
    _post_event(client, "d1", 100, lat=11.0)
    events = client.get("/events/acme/d1").json()["events"]
    assert len(events) == 1
    assert events[0]["latitude"] == 11.0


def test_post_event_unknown_device(client):
    response = _post_event(client, "ghost", 100)
    assert response.status_code == 404


def test_count_and_status_filter(client):
    _post_event(client, "d1", 100, status_code=1)
    _post_event(client, "d1", 200, status_code=2)
    _post_event(client, "d2", 300, status_code=1)

    body = client.get("/events/acme/*/count", params={"status_code": [1]}).json()
    assert body["count"] == 2
    assert body["countSupported"] is True


def test_distance(client):
    _post_event(client, "d1", 100, lat=0.0, lon=1.0)
    _post_event(client, "d1", 200, lat=0.0, lon=2.0)

    body = client.get("/events/acme/d1/distance", params={"start": 0, "end": 1_000}).json()
    assert body["distanceKM"] == pytest.approx(111.195, abs=1e-3)

    assert client.get("/events/acme/ghost/distance", params={"start": 0, "end": 1}).status_code == 404


def test_store_failure_maps_to_503(client, monkeypatch):
    def boom(*args, **kwargs):
        raise StoreUnavailable("select events", "connection refused")

    monkeypatch.setattr(events_routes.event_repo, "get_range_events", boom)
    response = client.get("/events/acme/d1")
    assert response.status_code == 503
    assert "select events" in response.json()["detail"]


def test_group_membership(client):
    assert client.get("/groups/ghost").status_code == 404
    assert client.post("/groups/acme", json={"groupID": "north"}).status_code == 201
    assert client.post("/groups/acme", json={"groupID": "north"}).status_code == 409

    assert client.put("/groups/acme/north/devices/d2").json() == {"added": True}
    assert client.put("/groups/acme/north/devices/d2").json() == {"added": False}
    assert client.put("/groups/acme/all/devices/d2").status_code == 400
    assert client.put("/groups/acme/north/devices/ghost").status_code == 404

    assert client.get("/groups/acme", params={"include_all": True}).json()["groups"] == ["all", "north"]
    assert client.get("/groups/acme/north/devices").json()["devices"] == ["d2"]
    assert client.get("/groups/acme/by-device/d2").json()["groups"] == ["all", "north"]

    assert client.delete("/groups/acme/north/devices/d2").json() == {"removed": True}
    assert client.get("/groups/acme/north/devices").json()["devices"] == []
    assert client.get("/groups/acme/south/devices").status_code == 404


def test_old_events_count_and_delete(client):
    for ts in (100, 200, 300):
        _post_event(client, "d1", ts)
    _post_event(client, "d2", 50)

    counted = client.get("/groups/acme/all/old-events", params={"before": 250}).json()
    assert counted["total"] == 2
    assert counted["countUnsupported"] is False

    deleted = client.delete("/groups/acme/all/old-events", params={"before": 250}).json()
    assert deleted["total"] == 2
    assert [d["deviceID"] for d in deleted["devices"]] == ["d1", "d2", "d3"]

    remaining = client.get("/events/acme/*").json()["events"]
    assert [(e["deviceID"], e["timestamp"]) for e in remaining] == [("d2", 50), ("d1", 300)]

    assert client.delete("/groups/acme/ghost/old-events", params={"before": 250}).status_code == 404


def test_mixed_case_ids(client):
    for ts in (100, 200):
        response = client.post("/events/", json={
            "accountID": "ACME", "deviceID": "D1", "timestamp": ts,
            "statusCode": 1, "latitude": 0.0, "longitude": float(ts) / 100
        })
        assert response.status_code == 201
        assert response.json()["deviceID"] == "d1"

    body = client.get("/events/ACME/D1").json()
    assert body["accountID"] == "acme"
    assert body["deviceID"] == "d1"
    assert body["count"] == 2

    assert client.get("/events/ACME/D1/count").json()["count"] == 2
    assert client.get("/events/Acme/*/count").json()["count"] == 2

    distance = client.get("/events/ACME/D1/distance", params={"start": 0, "end": 1_000}).json()
    assert distance["distanceKM"] == pytest.approx(111.195, abs=1e-3)


def test_distance_seeded_from_device(client, session_factory):
    from fleetstore.Repositories import account as account_repo

    DB = session_factory()
    device = account_repo.get_device(DB, "acme", "d1")
    device.lastOdometerKM = 10.0
    device.lastValidLatitude = 0.0
    device.lastValidLongitude = 1.0
    DB.commit()
    DB.close()

    _post_event(client, "d1", 100, lat=0.0, lon=2.0)
    body = client.get(
        "/events/acme/d1/distance", params={"start": 0, "end": 1_000, "seed_from_device": True}
    ).json()
    assert body["distanceKM"] == pytest.approx(10.0 + 111.195, abs=1e-3)
