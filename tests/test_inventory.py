from __future__ import annotations

from fastapi.testclient import TestClient

from powerdash.models.inventory import Channel, PowerMeter
from powerdash.services.inventory import join_power_meter_names
from tests.fakes import FakePowerMeterBackend


def test_join_power_meter_names() -> None:
    meters = [
        PowerMeter(id=1, power_meter_name="Main", ip_address="10.0.0.5"),
        PowerMeter(id=1, power_meter_name="Shadowed", ip_address="10.0.0.9"),
    ]
    channels = [
        Channel(id=1, power_meter_id=1, channel=1, channel_name="L1"),
        Channel(id=2, power_meter_id=3, channel=1, channel_name="L2"),
    ]
    joined = join_power_meter_names(channels, meters)
    assert [c.power_meter_name for c in joined] == ["Main", None]


def test_list_power_meters(client: TestClient, backend: FakePowerMeterBackend) -> None:
    resp = client.get("/api/v1/power-meters")
    assert resp.status_code == 200, resp.text
    assert [m["ip_address"] for m in resp.json()] == ["10.0.0.5", "10.0.0.6"]
    assert backend.calls[-1] == (
        "list_power_meters",
        {"first": None, "rowcount": None, "filters": None},
    )


def test_list_power_meters_paged(client: TestClient, backend: FakePowerMeterBackend) -> None:
    resp = client.get(
        "/api/v1/power-meters",
        params={"first": 1, "filter": '{"enabled": false}'},
    )
    assert resp.status_code == 200, resp.text
    assert [m["power_meter_name"] for m in resp.json()] == ["Workshop"]
    assert backend.calls[-1][1] == {"first": 1, "rowcount": 50, "filters": {"enabled": False}}


def test_bad_filter_is_400(client: TestClient) -> None:
    resp = client.get("/api/v1/channels", params={"filter": "not-json"})
    assert resp.status_code == 400
    resp = client.get("/api/v1/channels", params={"filter": "[1, 2]"})
    assert resp.status_code == 400


def test_channels_are_joined_with_power_meter_names(client: TestClient) -> None:
    resp = client.get("/api/v1/channels")
    assert resp.status_code == 200, resp.text
    names = {c["id"]: c.get("power_meter_name") for c in resp.json()}
    assert names == {11: "Main building", 12: "Main building", 21: "Workshop", 99: None}


def test_power_meter_channel_descriptors(client: TestClient) -> None:
    resp = client.get("/api/v1/power-meters/2/channels")
    assert resp.status_code == 200, resp.text
    assert resp.json() == [
        {"channel_number": 1, "channel_name": "Compressor", "owner_device_id": 2}
    ]


def test_counts(client: TestClient) -> None:
    assert client.get("/api/v1/power-meters/count").json() == {"count": 2}
    assert client.get("/api/v1/channels/count").json() == {"count": 4}
    assert client.get("/api/v1/assets/count").json() == {"count": 1}


def test_assets_and_names(client: TestClient) -> None:
    assets = client.get("/api/v1/assets")
    assert assets.status_code == 200, assets.text
    assert assets.json()[0]["asset_name"] == "Office"

    names = client.get("/api/v1/assets/names")
    assert names.status_code == 200, names.text
    assert names.json() == [{"id": 5, "name": "Office"}]


def test_listing_backend_down(client: TestClient, backend: FakePowerMeterBackend) -> None:
    backend.unavailable = True
    resp = client.get("/api/v1/assets")
    assert resp.status_code == 503


def test_health(client: TestClient, backend: FakePowerMeterBackend) -> None:
    assert client.get("/api/v1/health").json() == {"status": "ok"}
    backend.unavailable = True
    assert client.get("/api/v1/health").status_code == 503


def test_root(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.json() == {"name": "powerdash", "status": "ok"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
