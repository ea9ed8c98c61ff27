"""
Hybrid resolver: cache -> upstream v2 -> upstream v1 -> mock.

Every tier is a small strategy returning Hit or Miss. Expected misses
(skipped tier, 404, upstream outage) are values, not exceptions; only
ExhaustedFallback ever leaves this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, Union

from d6bridge.config import AppConfig
from d6bridge.data.cache import CacheStore
from d6bridge.data.connection import D6Client, RouteNotFound, UpstreamError
from d6bridge.data.mock_data import MockDataProvider
from d6bridge.data.probe import AvailabilityBoard, AvailabilityState
from d6bridge.data.queries import upstream_query
from d6bridge.data.resources import (
    LearnersRequest,
    LookupRequest,
    MarksRequest,
    ParentsRequest,
    ResourceKind,
    ResourceRequest,
    SchoolsRequest,
    StaffRequest,
    cache_key,
    kind_prefix,
)


logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_V2 = "upstream-v2"
SOURCE_V1 = "upstream-v1"
SOURCE_MOCK = "mock"


@dataclass(frozen=True)
class ResolvedResult:
    data: Any
    source: str  # "cache" | "upstream-v2" | "upstream-v1" | "mock"


@dataclass(frozen=True)
class Hit:
    data: Any
    source: str
    ttl_s: Optional[int] = None  # None: do not write back


@dataclass(frozen=True)
class Miss:
    tier: str
    reason: str  # "empty" | "unavailable" | "disabled" | "route_not_found" | "error"
    error: Optional[Exception] = None

    def describe(self) -> str:
        if self.error is not None:
            return f"{self.tier}: {self.reason} ({self.error})"
        return f"{self.tier}: {self.reason}"


Outcome = Union[Hit, Miss]


class Tier(Protocol):
    name: str

    def attempt(self, request: ResourceRequest, key: str) -> Outcome: ...


class ExhaustedFallback(RuntimeError):
    """No tier could serve the request."""

    def __init__(
        self,
        kind: ResourceKind,
        misses: list[Miss],
        availability: AvailabilityState,
        last_error: Optional[Exception],
        mock_enabled: bool,
    ):
        self.kind = kind
        self.misses = misses
        self.availability = availability
        self.last_error = last_error
        self.mock_enabled = mock_enabled
        tiers = "; ".join(m.describe() for m in misses)
        super().__init__(
            f"No data source could serve '{kind.value}' "
            f"(v2_available={availability.v2_available}, v1_available={availability.v1_available}, "
            f"mock_enabled={mock_enabled}). Tiers: {tiers}. "
            f"Last error: {last_error if last_error is not None else 'none'}"
        )

    @property
    def degraded(self) -> bool:
        """True when an upstream tier was tried and failed; False means nothing is configured to serve."""
        return self.last_error is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "exhausted_fallback",
            "resource": self.kind.value,
            "degraded": self.degraded,
            "availability": self.availability.to_dict(),
            "mock_enabled": self.mock_enabled,
            "tiers": [m.describe() for m in self.misses],
            "last_error": str(self.last_error) if self.last_error is not None else None,
        }


@dataclass
class CacheTier:
    cache: CacheStore
    name: str = SOURCE_CACHE

    def attempt(self, request: ResourceRequest, key: str) -> Outcome:
        cached = self.cache.get(key)
        if cached is None:
            return Miss(self.name, "empty")
        return Hit(cached, SOURCE_CACHE)


@dataclass
class UpstreamTier:
    client: D6Client
    is_available: Callable[[], bool]
    ttl_s: int
    name: str = field(default="")

    def __post_init__(self) -> None:
        self.name = self.name or f"upstream-{self.client.version}"

    def attempt(self, request: ResourceRequest, key: str) -> Outcome:
        if not self.is_available():
            # Skipped, not attempted: no round-trip for a version the probe ruled out
            return Miss(self.name, "unavailable")
        q = upstream_query(request)
        try:
            data = self.client.get(q.path, q.params)
        except RouteNotFound as e:
            logger.info("D6 %s has no route %s, falling through", self.client.version, q.path)
            return Miss(self.name, "route_not_found", e)
        except UpstreamError as e:
            logger.warning("D6 %s request failed for %s, falling through: %s", self.client.version, q.path, e)
            return Miss(self.name, "error", e)
        return Hit(data, self.name, self.ttl_s)


def mock_projection(mock: MockDataProvider, request: ResourceRequest) -> Any:
    if isinstance(request, SchoolsRequest):
        return mock.get_schools()
    elif isinstance(request, LearnersRequest):
        return mock.get_learners(request.school_id, limit=request.limit, offset=request.offset)
    elif isinstance(request, StaffRequest):
        return mock.get_staff(request.school_id)
    elif isinstance(request, ParentsRequest):
        return mock.get_parents(request.school_id)
    elif isinstance(request, MarksRequest):
        return mock.get_marks(request.learner_id, term=request.term, year=request.year)
    elif isinstance(request, LookupRequest):
        return mock.get_lookup(request.lookup_type)
    raise TypeError(f"Unsupported resource request: {type(request).__name__}")


@dataclass
class MockTier:
    mock: MockDataProvider
    enabled: bool
    ttl_s: int
    name: str = SOURCE_MOCK

    def attempt(self, request: ResourceRequest, key: str) -> Outcome:
        if not self.enabled:
            return Miss(self.name, "disabled")
        logger.info("Serving mock D6 data for %s", request.kind.value)
        return Hit(mock_projection(self.mock, request), SOURCE_MOCK, self.ttl_s)


class HybridResolver:
    def __init__(
        self,
        cfg: AppConfig,
        cache: CacheStore,
        v2: D6Client,
        v1: D6Client,
        mock: MockDataProvider,
        board: AvailabilityBoard,
    ):
        self.cfg = cfg
        self.cache = cache
        self.board = board
        self.mock = mock
        self.last_error: Optional[str] = None

        self.cache_tier = CacheTier(cache)
        self.v2_tier = UpstreamTier(v2, lambda: self.board.current.v2_available, cfg.real_data_ttl_s)
        self.v1_tier = UpstreamTier(v1, lambda: self.board.current.v1_available, cfg.real_data_ttl_s)
        self.mock_tier = MockTier(mock, cfg.enable_mock_data, cfg.mock_data_ttl_s)

        if cfg.use_mock_data_first and not cfg.enable_mock_data:
            logger.warning("Sandbox mode is on but mock data is disabled: sandbox requests cannot be served")

    @property
    def availability(self) -> AvailabilityState:
        return self.board.current

    def pipeline(self, fresh: bool = False) -> list[Tier]:
        """Ordered tiers for one call."""
        tiers: list[Tier] = [] if fresh else [self.cache_tier]
        sandbox = self.cfg.use_mock_data_first and (not fresh or self.cfg.sandbox_applies_to_fresh)
        if not sandbox:
            tiers += [self.v2_tier, self.v1_tier]
        tiers.append(self.mock_tier)
        return tiers

    def resolve(self, request: ResourceRequest, fresh: bool = False) -> ResolvedResult:
        key = cache_key(request, self.cfg.cache_prefix)
        availability = self.board.current
        misses: list[Miss] = []
        last_error: Optional[Exception] = None

        for tier in self.pipeline(fresh):
            outcome = tier.attempt(request, key)
            if isinstance(outcome, Hit):
                if outcome.source in (SOURCE_V2, SOURCE_V1):
                    # Upstream answered again; an earlier outage is no longer current
                    self.last_error = None
                if outcome.ttl_s is not None:
                    self.cache.set(key, outcome.data, outcome.ttl_s)
                logger.debug("Resolved %s from %s", key, outcome.source)
                return ResolvedResult(data=outcome.data, source=outcome.source)
            misses.append(outcome)
            if outcome.error is not None:
                last_error = outcome.error
                self.last_error = str(outcome.error)

        exc = ExhaustedFallback(request.kind, misses, availability, last_error, self.cfg.enable_mock_data)
        logger.error("%s", exc)
        raise exc

    # Per-resource helpers

    def get_schools(self) -> ResolvedResult:
        return self.resolve(SchoolsRequest())

    def get_learners(self, school_id: int, limit: int = 50, offset: int = 0) -> ResolvedResult:
        return self.resolve(LearnersRequest(school_id, limit=limit, offset=offset))

    def get_staff(self, school_id: int) -> ResolvedResult:
        return self.resolve(StaffRequest(school_id))

    def get_parents(self, school_id: int) -> ResolvedResult:
        return self.resolve(ParentsRequest(school_id))

    def get_marks(self, learner_id: int, term: Optional[int] = None, year: Optional[int] = None) -> ResolvedResult:
        return self.resolve(MarksRequest(learner_id, term=term, year=year))

    def get_lookup_data(self, lookup_type: str) -> ResolvedResult:
        return self.resolve(LookupRequest(lookup_type))

    def invalidate(self, kind: ResourceKind) -> int:
        return self.cache.delete_by_prefix(kind_prefix(kind, self.cfg.cache_prefix))

    def clear_cache(self) -> int:
        removed = self.cache.delete_by_prefix(self.cfg.cache_prefix)
        logger.info("D6 cache cleared (%d keys)", removed)
        return removed
