from __future__ import annotations

import httpx
import pytest

from transit_resolver.adapters.api.dependencies import (
    get_live_vehicle_service,
    get_resolution_service,
)
from transit_resolver.app.services.dataset_store import GtfsDatasetStore
from transit_resolver.app.services.live_vehicle_service import LiveVehicleService
from transit_resolver.app.services.vehicle_resolution_service import (
    VehicleResolutionService,
)
from transit_resolver.main import app


@pytest.fixture
def services(source_factory, feed_zip: bytes):
    source = source_factory({"vasttrafik": feed_zip, "ul": feed_zip})
    resolution = VehicleResolutionService(
        store=GtfsDatasetStore(archive_source=source)
    )
    live = LiveVehicleService(resolution=resolution, default_operator="sl")

    app.dependency_overrides[get_resolution_service] = lambda: resolution
    app.dependency_overrides[get_live_vehicle_service] = lambda: live
    yield resolution, live
    app.dependency_overrides.clear()


def _client(raise_app_exceptions: bool = True) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    async with _client() as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_preload_and_status(services) -> None:
    async with _client() as client:
        before = await client.get("/operators/vasttrafik")
        loaded = await client.post("/operators/vasttrafik/preload")

    assert before.json() == {
        "operator": "vasttrafik",
        "state": "not_loaded",
        "stats": None,
    }
    assert loaded.status_code == 200
    assert loaded.json() == {
        "operator": "vasttrafik",
        "state": "loaded",
        "stats": {
            "trips": 3,
            "routes": 2,
            "stops": 3,
            "shapes": 2,
            "shapes_loaded": True,
        },
    }


@pytest.mark.unit
@pytest.mark.anyio
async def test_resolve_without_wait_requires_loaded_dataset(services) -> None:
    async with _client() as client:
        resp = await client.post(
            "/resolve",
            params={"wait": "false"},
            json={"operator": "vasttrafik", "trip_id": "T1"},
        )

    assert resp.status_code == 409


@pytest.mark.unit
@pytest.mark.anyio
async def test_resolve_waits_for_dataset(services) -> None:
    async with _client() as client:
        resp = await client.post(
            "/resolve",
            json={"operator": "vasttrafik", "trip_id": "T2", "stop_sequence": 2},
        )

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["line"] == "7"
    assert payload["route"]["route_type"] == 0
    assert payload["destination"] == "Gamma"
    assert payload["next_stop_name"] == "Beta"
    assert [s["stop_id"] for s in payload["journey_stops"]] == ["A", "B", "C"]
    assert payload["shape"] is None
    assert payload["notes"] == ['shape_id "S2" not found or has < 2 points']


@pytest.mark.unit
@pytest.mark.anyio
async def test_resolve_returns_shape_coordinates(services) -> None:
    async with _client() as client:
        resp = await client.post(
            "/resolve", json={"operator": "vasttrafik", "trip_id": "T1"}
        )

    shape = resp.json()["shape"]
    assert shape == {"shape_id": "S1", "coordinates": [[57.7, 11.97], [57.71, 11.98]]}


@pytest.mark.unit
@pytest.mark.anyio
async def test_resolve_rejects_invalid_payload(services) -> None:
    async with _client() as client:
        resp = await client.post("/resolve", json={"operator": "", "lat": 123.0})

    assert resp.status_code == 422


@pytest.mark.unit
@pytest.mark.anyio
async def test_stops_and_lines(services) -> None:
    async with _client() as client:
        await client.post("/operators/vasttrafik/preload")
        all_stops = await client.get("/operators/vasttrafik/stops")
        boxed = await client.get(
            "/operators/vasttrafik/stops",
            params={
                "min_lat": 57.69,
                "min_lon": 11.96,
                "max_lat": 57.706,
                "max_lon": 11.976,
            },
        )
        partial = await client.get(
            "/operators/vasttrafik/stops", params={"min_lat": 57.0}
        )
        line = await client.get("/operators/vasttrafik/lines", params={"trip_id": "T1"})
        missing = await client.get(
            "/operators/vasttrafik/lines", params={"route_id": "RX"}
        )

    assert [s["stop_id"] for s in all_stops.json()] == ["A", "B", "C"]
    assert [s["stop_id"] for s in boxed.json()] == ["A", "B"]
    assert partial.status_code == 422
    assert line.json()["line"] == "42"
    assert line.json()["headsign"] == "Downtown"
    assert missing.status_code == 404


@pytest.mark.unit
@pytest.mark.anyio
async def test_enrich_vehicles_with_preload(services) -> None:
    vehicle = {
        "vehicle_id": "v1",
        "trip_id": "T1",
        "route_id": "R1",
        "operator": "ul",
        "lat": 59.86,
        "lon": 17.64,
        "label": "9011003000100000",
    }
    async with _client() as client:
        cold = await client.post("/vehicles/enrich", json={"vehicles": [vehicle]})
        warm = await client.post(
            "/vehicles/enrich", json={"vehicles": [vehicle], "preload": True}
        )

    assert cold.json()[0]["resolved"] is False
    assert cold.json()[0]["line"] == "R1"

    (enriched,) = warm.json()
    assert enriched["resolved"] is True
    assert enriched["operator"] == "ul"
    assert enriched["line"] == "42"
    assert enriched["mode"] == "bus"
    assert enriched["destination"] == "Downtown"


@pytest.mark.unit
@pytest.mark.anyio
async def test_preload_region(services) -> None:
    async with _client() as client:
        resp = await client.post(
            "/vehicles/preload-region", json={"lat": 59.86, "lon": 17.64}
        )

    assert resp.status_code == 200
    assert [(s["operator"], s["state"]) for s in resp.json()] == [
        ("sl", "not_loaded"),
        ("ul", "loaded"),
    ]


@pytest.mark.unit
@pytest.mark.anyio
async def test_unhandled_errors_are_json() -> None:
    class _BrokenService:
        def line_info(self, operator_key: str, **kwargs):
            raise RuntimeError("tables exploded")

    app.dependency_overrides[get_resolution_service] = lambda: _BrokenService()
    try:
        async with _client(raise_app_exceptions=False) as client:
            resp = await client.get("/operators/sl/lines", params={"route_id": "R1"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"detail": "tables exploded"}
