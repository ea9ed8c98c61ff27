"""
Availability probe.

Answers "is this D6 API version reachable for our credentials?" with a cheap
lookup fetch. The result is advisory: a stale "unavailable" only means a tier
gets skipped, never that wrong data is served.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from typing import Any

from d6bridge.config import AppConfig
from d6bridge.data.connection import D6Client, RouteNotFound, UpstreamError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityState:
    v1_available: bool = False
    v2_available: bool = False
    mode: str = "hybrid"  # "production" | "sandbox" | "hybrid"

    @property
    def any_upstream(self) -> bool:
        return self.v1_available or self.v2_available

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def initial_state(cfg: AppConfig) -> AvailabilityState:
    return AvailabilityState(mode="sandbox" if cfg.use_mock_data_first else "hybrid")


def derive_mode(cfg: AppConfig, v1_available: bool, v2_available: bool) -> str:
    if cfg.use_mock_data_first:
        return "sandbox"
    if v1_available or v2_available:
        return "production"
    if cfg.enable_mock_data:
        return "sandbox"
    return "hybrid"


class AvailabilityBoard:
    """
    Holds the current AvailabilityState.
    Readers get whatever snapshot is published; publishing is a single reference swap.
    """

    def __init__(self, state: AvailabilityState):
        self._state = state

    @property
    def current(self) -> AvailabilityState:
        return self._state

    def publish(self, state: AvailabilityState) -> None:
        self._state = state


class AvailabilityProbe:
    def __init__(self, v2: D6Client, v1: D6Client, cfg: AppConfig):
        self.v2 = v2
        self.v1 = v1
        self.cfg = cfg

    def check(self, client: D6Client) -> bool:
        path = f"/adminplus/lookup/{self.cfg.probe_lookup_type}"
        try:
            client.get(path)
        except RouteNotFound:
            # Some environments simply lack this version
            logger.info("D6 %s API not available (404 - route not found)", client.version)
            return False
        except UpstreamError as e:
            logger.warning("D6 %s API probe failed: %s", client.version, e)
            return False
        logger.info("D6 %s API is available", client.version)
        return True

    def run(self) -> AvailabilityState:
        """Probe v2 then v1. Never raises."""
        if self.cfg.use_mock_data_first and self.cfg.sandbox_applies_to_fresh:
            # No call can reach upstream, so don't touch it
            logger.info("Sandbox mode enabled - using mock data first, upstream probe skipped")
            return initial_state(self.cfg)

        v2_ok = self.check(self.v2)
        v1_ok = self.check(self.v1)
        state = AvailabilityState(
            v1_available=v1_ok,
            v2_available=v2_ok,
            mode=derive_mode(self.cfg, v1_ok, v2_ok),
        )
        if state.mode == "hybrid":
            logger.error("No D6 API access and mock data disabled")
        logger.info("D6 availability: %s", state.to_dict())
        return state

    def run_and_publish(self, board: AvailabilityBoard) -> AvailabilityState:
        state = self.run()
        board.publish(state)
        return state

    def start_background(self, board: AvailabilityBoard) -> threading.Thread:
        """Probe without blocking callers; they see the pre-probe state until it lands."""
        t = threading.Thread(target=self.run_and_publish, args=(board,), name="d6-probe", daemon=True)
        t.start()
        return t
