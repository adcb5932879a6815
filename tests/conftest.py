import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402
from trace_factories import make_point  # noqa: E402


@pytest.fixture(autouse=True)
def _default_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ROUTES_DIR", str(tmp_path / "routes"))
    monkeypatch.setenv("OSRM_MATCH_URL", "http://osrm.test/match/v1/driving")
    monkeypatch.setenv("MAP_MATCH_MAX_RETRIES", "0")
    monkeypatch.delenv("ROUTE_CACHE_TTL_SECONDS", raising=False)


@pytest.fixture
def straight_trace():
    """Ten points ~11 m apart heading north, one second apart (~40 km/h)."""
    return [make_point(40.0 + i * 0.0001, -74.0, i) for i in range(10)]
