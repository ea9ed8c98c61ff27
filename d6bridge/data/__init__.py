"""
Data access layer.

Design rules:
- Callers go through HybridResolver only; tiers are never called directly.
- Every upstream call is wrapped so that failure falls through to the next tier.
- No env var reads here (config-only).
"""

from __future__ import annotations

from d6bridge.data.cache import CacheStore, MemoryCacheStore, RedisCacheStore, get_cache_store
from d6bridge.data.connection import D6Client, RouteNotFound, UpstreamError, get_d6_clients
from d6bridge.data.health import HealthReporter, HealthSnapshot
from d6bridge.data.mock_data import MockDataProvider
from d6bridge.data.probe import AvailabilityBoard, AvailabilityProbe, AvailabilityState
from d6bridge.data.resources import (
    LearnersRequest,
    LookupRequest,
    MarksRequest,
    ParentsRequest,
    ResourceKind,
    ResourceRequest,
    SchoolsRequest,
    StaffRequest,
)
from d6bridge.data.service import ExhaustedFallback, HybridResolver, ResolvedResult

__all__ = [
    "AvailabilityBoard",
    "AvailabilityProbe",
    "AvailabilityState",
    "CacheStore",
    "D6Client",
    "ExhaustedFallback",
    "HealthReporter",
    "HealthSnapshot",
    "HybridResolver",
    "LearnersRequest",
    "LookupRequest",
    "MarksRequest",
    "MemoryCacheStore",
    "MockDataProvider",
    "ParentsRequest",
    "RedisCacheStore",
    "ResolvedResult",
    "ResourceKind",
    "ResourceRequest",
    "RouteNotFound",
    "SchoolsRequest",
    "StaffRequest",
    "UpstreamError",
    "get_cache_store",
    "get_d6_clients",
]
