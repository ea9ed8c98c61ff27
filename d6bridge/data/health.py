from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from d6bridge.data.resources import LookupRequest
from d6bridge.data.service import ExhaustedFallback, HybridResolver


@dataclass(frozen=True)
class HealthSnapshot:
    status: str  # "healthy" | "degraded" | "unhealthy"
    availability: dict[str, Any]
    response_time_ms: int
    mock_data_available: bool
    cache: dict[str, Any]
    last_error: Optional[str]
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "availability": self.availability,
            "response_time_ms": self.response_time_ms,
            "mock_data_available": self.mock_data_available,
            "cache": self.cache,
            "last_error": self.last_error,
            "timestamp": self.timestamp,
        }


def derive_status(any_upstream: bool, mock_enabled: bool, sandbox: bool = False) -> str:
    if sandbox:
        # Regular calls never leave the mock tier
        return "degraded" if mock_enabled else "unhealthy"
    if any_upstream:
        return "healthy"
    if mock_enabled:
        return "degraded"
    return "unhealthy"


class HealthReporter:
    """Stateless: every snapshot is derived from the resolver at call time."""

    def __init__(self, resolver: HybridResolver, probe_lookup_type: str = "genders"):
        self.resolver = resolver
        self.probe_lookup_type = probe_lookup_type

    def snapshot(self) -> HealthSnapshot:
        start = time.perf_counter()
        error: Optional[str] = None
        try:
            self.resolver.resolve(LookupRequest(self.probe_lookup_type))
        except ExhaustedFallback as e:
            error = str(e)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        availability = self.resolver.availability
        mock_enabled = self.resolver.cfg.enable_mock_data
        return HealthSnapshot(
            status=derive_status(availability.any_upstream, mock_enabled, self.resolver.cfg.use_mock_data_first),
            availability=availability.to_dict(),
            response_time_ms=elapsed_ms,
            mock_data_available=mock_enabled,
            cache=self.resolver.cache.stats(),
            last_error=error or self.resolver.last_error,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
