"""
Shared fixtures.

No test touches the network: upstream clients are replaced by FakeClient,
and TTL checks run against a manual clock.
"""

from dataclasses import replace
from typing import Any, Optional

import pytest

from d6bridge.config import AppConfig
from d6bridge.context import build_context
from d6bridge.data.cache import MemoryCacheStore
from d6bridge.data.connection import RouteNotFound, UpstreamError
from d6bridge.data.mock_data import MockDataProvider
from d6bridge.data.probe import AvailabilityState


BASE_CONFIG = AppConfig(
    d6_base_url="https://d6.test/api/v2",
    d6_username="tester",
    d6_password="secret",
    request_timeout_s=10.0,
    enable_mock_data=True,
    use_mock_data_first=False,
    sandbox_applies_to_fresh=True,
    real_data_ttl_s=600,
    mock_data_ttl_s=300,
    probe_lookup_type="genders",
    cache_backend="memory",
    redis_url=None,
    cache_prefix="d6:",
    log_level="DEBUG",
)


class FakeClient:
    """Stands in for D6Client. `routes` maps path -> payload or exception instance."""

    def __init__(self, version: str, routes: Optional[dict[str, Any]] = None, default: Any = None):
        self.version = version
        self.routes = routes or {}
        self.default = default
        self.calls: list[tuple[str, Optional[dict]]] = []

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        self.calls.append((path, params))
        result = self.routes.get(path, self.default)
        if result is None:
            raise RouteNotFound(self.version, path)
        if isinstance(result, Exception):
            raise result
        return result


class ManualClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_config(**overrides: Any) -> AppConfig:
    return replace(BASE_CONFIG, **overrides)


def upstream_failure(version: str, path: str = "/x", status: Optional[int] = 503) -> UpstreamError:
    return UpstreamError(version, path, f"HTTP {status}", status=status)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def cache(clock):
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def mock_provider():
    return MockDataProvider(seed=7)


@pytest.fixture
def v2_client():
    return FakeClient("v2")


@pytest.fixture
def v1_client():
    return FakeClient("v1")


@pytest.fixture
def make_context(cache, v2_client, v1_client, mock_provider):
    """Build a context with probing skipped and availability set by hand."""

    def _make(v2_available: bool = False, v1_available: bool = False, **cfg_overrides: Any):
        cfg = make_config(**cfg_overrides)
        ctx = build_context(
            cfg,
            probe="skip",
            cache=cache,
            clients=(v2_client, v1_client),
            mock=mock_provider,
        )
        ctx.board.publish(AvailabilityState(v1_available=v1_available, v2_available=v2_available, mode="hybrid"))
        return ctx

    return _make
