"""Shared test fixtures for chuk-mcp-wfs."""

import asyncio

import pytest
from unittest.mock import MagicMock

from chuk_mcp_wfs.constants import DEFAULT_LAYER
from chuk_mcp_wfs.core.cache import RequestCache
from chuk_mcp_wfs.core.orchestrator import FeatureFetchOrchestrator, OrchestratorConfig

# Munich, a few hundred metres apart at precision 3
BBOX_A = (11.570, 48.130, 11.580, 48.140)
BBOX_B = (11.590, 48.130, 11.600, 48.140)
BBOX_C = (11.610, 48.130, 11.620, 48.140)

TEST_DEBOUNCE_MS = 20


def square(lon: float, lat: float, size: float = 0.0001) -> dict:
    """Closed square polygon geometry with its south-west corner at (lon, lat)."""
    return {
        "type": "Polygon",
        "coordinates": [
            [
                [lon, lat],
                [lon + size, lat],
                [lon + size, lat + size],
                [lon, lat + size],
                [lon, lat],
            ]
        ],
    }


def building(height, lon: float = 11.575, lat: float = 48.135, **props) -> dict:
    properties = {"height": height, **props}
    return {"type": "Feature", "geometry": square(lon, lat), "properties": properties}


def feature_collection(features: list[dict] | None = None, tag=None) -> dict:
    fc = {"type": "FeatureCollection", "features": features or []}
    if tag is not None:
        fc["bbox"] = list(tag)
    return fc


class FakeFeatureClient:
    """Controllable stand-in for WFSClient.

    In auto mode every call returns ``response`` if set, else a collection
    tagged with its bbox. In manual mode each call parks on a future the
    test resolves or fails.
    With ``ignore_cancel`` a parked call keeps waiting after cancellation,
    like a transport that cannot abort an in-flight request.
    """

    def __init__(self, auto: bool = True, ignore_cancel: bool = False):
        self.auto = auto
        self.ignore_cancel = ignore_cancel
        self.fail_with: Exception | None = None
        self.response: dict | None = None
        self.calls: list[tuple[str, tuple]] = []
        self.pending: list[tuple[str, tuple, asyncio.Future]] = []
        self.cancelled: list[tuple] = []
        self.closed = False

    async def fetch_features(self, type_name, bbox=None):
        bbox = tuple(bbox) if bbox is not None else None
        self.calls.append((type_name, bbox))

        if self.auto:
            await asyncio.sleep(0)
            if self.fail_with is not None:
                raise self.fail_with
            if self.response is not None:
                return self.response
            return feature_collection([building(12.0)], tag=bbox)

        fut = asyncio.get_running_loop().create_future()
        self.pending.append((type_name, bbox, fut))
        while True:
            try:
                return await asyncio.shield(fut)
            except asyncio.CancelledError:
                self.cancelled.append(bbox)
                if not self.ignore_cancel:
                    raise

    def resolve(self, index: int, fc: dict | None = None) -> dict:
        _, bbox, fut = self.pending[index]
        fc = fc if fc is not None else feature_collection([building(12.0)], tag=bbox)
        fut.set_result(fc)
        return fc

    def fail(self, index: int, error: Exception) -> None:
        self.pending[index][2].set_exception(error)

    async def aclose(self):
        self.closed = True


async def wait_for(predicate, timeout: float = 2.0) -> None:
    """Poll until ``predicate()`` is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_config():
    return OrchestratorConfig(
        layer=DEFAULT_LAYER,
        debounce_ms=TEST_DEBOUNCE_MS,
        stale_time_ms=60_000,
    )


@pytest.fixture
def fake_client():
    return FakeFeatureClient()


@pytest.fixture
def manual_client():
    return FakeFeatureClient(auto=False)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def orchestrator(fake_client, test_config):
    """Orchestrator over an auto-resolving fake client."""
    return FeatureFetchOrchestrator(client=fake_client, config=test_config)


@pytest.fixture
def manual_orchestrator(manual_client, test_config, fake_clock):
    """Orchestrator over a manually resolved fake client and a fake cache clock."""
    cache = RequestCache(stale_time_s=60.0, max_entries=50, clock=fake_clock)
    return FeatureFetchOrchestrator(client=manual_client, cache=cache, config=test_config)


@pytest.fixture
def munich_buildings():
    """Feature collection with a spread of heights, one missing and one zero."""
    return feature_collection(
        [
            building(5.0, ogc_fid=1, source="osm", region="europe", var=0.4),
            building(15.0, ogc_fid=2, source="osm", region="europe"),
            building(25.0, ogc_fid=3),
            building(45.0, ogc_fid=4),
            building(75.0, ogc_fid=5),
            building(120.0, ogc_fid=6),
            building(None, ogc_fid=7),
            building(0, ogc_fid=8),
        ]
    )


@pytest.fixture
def mock_mcp():
    """Mock ChukMCPServer."""
    mcp = MagicMock()
    mcp.tool = MagicMock(return_value=lambda fn: fn)
    return mcp
