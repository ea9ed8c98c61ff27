"""
Wiring. One BridgeContext per process, passed by reference to whatever needs
resolution (tool layer, scripts, tests). Nothing here is a module-level global.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from d6bridge.config import AppConfig
from d6bridge.data.cache import CacheStore, get_cache_store
from d6bridge.data.connection import D6Client, get_d6_clients
from d6bridge.data.health import HealthReporter
from d6bridge.data.mock_data import MockDataProvider
from d6bridge.data.probe import AvailabilityBoard, AvailabilityProbe, AvailabilityState, initial_state
from d6bridge.data.service import HybridResolver


logger = logging.getLogger(__name__)

PROBE_MODES = ("background", "sync", "skip")


@dataclass
class BridgeContext:
    cfg: AppConfig
    cache: CacheStore
    v2: D6Client
    v1: D6Client
    mock: MockDataProvider
    board: AvailabilityBoard
    probe: AvailabilityProbe
    resolver: HybridResolver
    health: HealthReporter
    probe_thread: Optional[threading.Thread] = None

    @property
    def availability(self) -> AvailabilityState:
        return self.board.current

    def reprobe(self) -> AvailabilityState:
        """Explicit, synchronous re-probe."""
        return self.probe.run_and_publish(self.board)

    def integration_info(self) -> dict[str, Any]:
        """Configuration and current state, credentials redacted."""
        cfg = self.cfg
        return {
            **self.availability.to_dict(),
            "mock_data_enabled": cfg.enable_mock_data,
            "config": {
                "v2_base_url": cfg.v2_base_url,
                "v1_base_url": cfg.v1_base_url,
                "username": cfg.d6_username,
                "has_credentials": cfg.has_credentials,
                "timeout_s": cfg.request_timeout_s,
                "enable_mock_data": cfg.enable_mock_data,
                "use_mock_data_first": cfg.use_mock_data_first,
                "sandbox_applies_to_fresh": cfg.sandbox_applies_to_fresh,
                "real_data_ttl_s": cfg.real_data_ttl_s,
                "mock_data_ttl_s": cfg.mock_data_ttl_s,
            },
            "mock_dataset": self.mock.summary() if cfg.enable_mock_data else None,
            "cache": self.cache.stats(),
        }


def build_context(
    cfg: AppConfig,
    probe: str = "background",
    cache: Optional[CacheStore] = None,
    clients: Optional[tuple[D6Client, D6Client]] = None,
    mock: Optional[MockDataProvider] = None,
) -> BridgeContext:
    """
    probe: "background" (daemon thread), "sync" (block until done) or "skip"
    (availability stays all-false until reprobe()).
    """
    if probe not in PROBE_MODES:
        raise ValueError(f"probe must be one of {PROBE_MODES}, got {probe!r}")

    cache = cache if cache is not None else get_cache_store(cfg)
    v2, v1 = clients if clients is not None else get_d6_clients(cfg)
    mock = mock if mock is not None else MockDataProvider()
    board = AvailabilityBoard(initial_state(cfg))
    prober = AvailabilityProbe(v2, v1, cfg)
    resolver = HybridResolver(cfg, cache, v2, v1, mock, board)
    health = HealthReporter(resolver, cfg.probe_lookup_type)

    ctx = BridgeContext(
        cfg=cfg,
        cache=cache,
        v2=v2,
        v1=v1,
        mock=mock,
        board=board,
        probe=prober,
        resolver=resolver,
        health=health,
    )

    if probe == "sync":
        ctx.reprobe()
    elif probe == "background":
        ctx.probe_thread = prober.start_background(board)
    else:
        logger.info("Availability probe skipped; upstream tiers stay disabled until reprobe()")
    return ctx
