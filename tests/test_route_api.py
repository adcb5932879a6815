import asyncio
import json
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

import route_api
from app import app
from trace_cleaning import ResultCache, TracePipeline, TraceStore
from trace_cleaning.road_snapper import SnapResult
from trace_factories import raw_point


class StubSnapper:
    def __init__(self, snapped: bool = True) -> None:
        self.snapped = snapped
        self.calls = 0

    async def snap_to_road(self, trace):
        self.calls += 1
        if not self.snapped:
            return SnapResult.fallback(trace, "OSRM match error: 503")
        return SnapResult.success(trace[:2])


class HangingSnapper:
    def __init__(self) -> None:
        self.cancelled = False

    async def snap_to_road(self, trace):
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class FakeRequest:
    def __init__(self, disconnected: bool) -> None:
        self.disconnected = disconnected
        self.url = SimpleNamespace(path="/api/route/trip")

    async def is_disconnected(self) -> bool:
        return self.disconnected


@pytest.fixture
def routes_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "stored"
    directory.mkdir()
    return directory


@pytest.fixture
def client(routes_dir: Path):
    with (
        patch.object(route_api, "store", TraceStore(routes_dir)),
        patch.object(route_api, "pipeline", TracePipeline(snapper=StubSnapper())),
        patch.object(route_api, "result_cache", ResultCache(0)),
    ):
        yield TestClient(app)


def _write(routes_dir: Path, name: str, document) -> None:
    text = document if isinstance(document, str) else json.dumps(document)
    (routes_dir / f"{name}.json").write_text(text, encoding="utf-8")


def _coordinates(length: int = 5) -> list[dict]:
    return [raw_point(40.0 + i * 0.0001, -74.0, i) for i in range(length)]


def test_health_check_is_independent_of_pipeline() -> None:
    with (
        patch.object(route_api, "store", None),
        patch.object(route_api, "pipeline", None),
    ):
        response = TestClient(app).get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["timestamp"].endswith("Z")


def test_get_route_returns_cleaned_coordinates(client, routes_dir) -> None:
    coordinates = _coordinates()
    coordinates.insert(2, {"lat": "bad", "lng": 1})
    coordinates.insert(4, raw_point(50.0, -74.0, 2.2))
    _write(routes_dir, "2024-05-01", {"coordinates": coordinates})

    response = client.get("/api/route/2024-05-01")

    assert response.status_code == 200
    body = response.json()
    assert len(body["coordinates"]) == 5
    assert body["coordinates"][0] == {
        "lat": 40.0,
        "lng": -74.0,
        "timestamp": "2024-05-01T08:00:00Z",
    }
    assert body["metadata"] == {
        "originalCount": 7,
        "processedCount": 5,
        "roadSnapped": False,
        "smoothed": False,
        "invalidCount": 1,
        "noiseRemovedCount": 1,
        "snapApplied": False,
    }


def test_get_route_with_snap_and_smooth(client, routes_dir) -> None:
    _write(routes_dir, "trip", {"coordinates": _coordinates()})

    response = client.get("/api/route/trip?snap=true&smooth=true")

    assert response.status_code == 200
    metadata = response.json()["metadata"]
    assert metadata["processedCount"] == 2
    assert metadata["roadSnapped"] is True
    assert metadata["smoothed"] is True
    assert metadata["snapApplied"] is True


def test_snap_outage_still_returns_unsnapped_trace(routes_dir) -> None:
    _write(routes_dir, "trip", {"coordinates": _coordinates()})

    with (
        patch.object(route_api, "store", TraceStore(routes_dir)),
        patch.object(
            route_api,
            "pipeline",
            TracePipeline(snapper=StubSnapper(snapped=False)),
        ),
    ):
        response = TestClient(app).get("/api/route/trip?snap=true")

    assert response.status_code == 200
    body = response.json()
    assert len(body["coordinates"]) == 5
    assert body["metadata"]["roadSnapped"] is True
    assert body["metadata"]["snapApplied"] is False


def test_missing_trace_returns_500(client) -> None:
    response = client.get("/api/route/1999-01-01")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to read route data file."}


def test_invalid_json_returns_500(client, routes_dir) -> None:
    _write(routes_dir, "broken", "{not json")

    response = client.get("/api/route/broken")

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid JSON format in file."}


def test_non_array_coordinates_returns_400(client, routes_dir) -> None:
    _write(routes_dir, "weird", {"coordinates": "not-an-array"})

    response = client.get("/api/route/weird")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid coordinates format"}


def test_missing_coordinates_key_returns_400(client, routes_dir) -> None:
    _write(routes_dir, "nokey", {"points": []})

    response = client.get("/api/route/nokey")

    assert response.status_code == 400


def test_empty_trace_returns_200_with_empty_coordinates(client, routes_dir) -> None:
    _write(routes_dir, "empty", {"coordinates": []})

    response = client.get("/api/route/empty?snap=true")

    assert response.status_code == 200
    body = response.json()
    assert body["coordinates"] == []
    assert body["metadata"]["processedCount"] == 0


@pytest.mark.parametrize("trace_id", ["..", ".hidden", "a b", "%2e%2e%2fsecret"])
def test_rejects_unsafe_identifiers(client, trace_id) -> None:
    response = client.get(f"/api/route/{trace_id}")

    assert response.status_code in (400, 404)
    assert "error" in response.json()


def test_results_are_cached_per_option_set(routes_dir) -> None:
    _write(routes_dir, "trip", {"coordinates": _coordinates()})
    snapper = StubSnapper()

    with (
        patch.object(route_api, "store", TraceStore(routes_dir)),
        patch.object(route_api, "pipeline", TracePipeline(snapper=snapper)),
        patch.object(route_api, "result_cache", ResultCache(60)),
    ):
        client = TestClient(app)
        first = client.get("/api/route/trip?snap=true")
        (routes_dir / "trip.json").unlink()
        second = client.get("/api/route/trip?snap=true")
        uncached = client.get("/api/route/trip?snap=true&smooth=true")

    assert first.json() == second.json()
    assert snapper.calls == 1
    assert uncached.status_code == 500


def test_failed_snaps_are_not_cached(routes_dir) -> None:
    _write(routes_dir, "trip", {"coordinates": _coordinates()})
    snapper = StubSnapper(snapped=False)

    with (
        patch.object(route_api, "store", TraceStore(routes_dir)),
        patch.object(route_api, "pipeline", TracePipeline(snapper=snapper)),
        patch.object(route_api, "result_cache", ResultCache(60)),
    ):
        client = TestClient(app)
        client.get("/api/route/trip?snap=true")
        client.get("/api/route/trip?snap=true")

    assert snapper.calls == 2


def test_non_object_root_returns_400(client, routes_dir) -> None:
    _write(routes_dir, "list", "[1, 2, 3]")

    response = client.get("/api/route/list")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid coordinates format"}


def test_null_root_returns_500(client, routes_dir) -> None:
    _write(routes_dir, "null", "null")

    response = client.get("/api/route/null")

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid JSON format in file."}


@pytest.mark.asyncio
async def test_run_until_disconnect_returns_result_while_connected() -> None:
    async def work() -> str:
        await asyncio.sleep(0.02)
        return "done"

    result = await route_api.run_until_disconnect(
        FakeRequest(disconnected=False),
        work(),
        poll_interval=0.005,
    )

    assert result == "done"


@pytest.mark.asyncio
async def test_client_disconnect_cancels_pipeline_and_skips_cache(routes_dir) -> None:
    _write(routes_dir, "trip", {"coordinates": _coordinates()})
    snapper = HangingSnapper()
    cache = ResultCache(60)

    with (
        patch.object(route_api, "store", TraceStore(routes_dir)),
        patch.object(route_api, "pipeline", TracePipeline(snapper=snapper)),
        patch.object(route_api, "result_cache", cache),
        pytest.raises(HTTPException) as raised,
    ):
        await route_api.get_route(
            FakeRequest(disconnected=True),
            "trip",
            snap="true",
            smooth=None,
        )

    assert raised.value.status_code == route_api.CLIENT_CLOSED_REQUEST == 499
    assert raised.value.detail == "Client closed request"
    assert snapper.cancelled is True
    assert len(cache) == 0
