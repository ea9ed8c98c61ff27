from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from d6bridge.config import USER_AGENT, AppConfig


logger = logging.getLogger(__name__)


class UpstreamError(RuntimeError):
    """Any failed upstream call: timeout, network error, non-2xx, bad JSON."""

    def __init__(self, version: str, path: str, message: str, status: Optional[int] = None):
        super().__init__(f"D6 {version} {path}: {message}")
        self.version = version
        self.path = path
        self.status = status


class RouteNotFound(UpstreamError):
    """404 from upstream. Some environments simply lack an API version or route."""

    def __init__(self, version: str, path: str):
        super().__init__(version, path, "route not found", status=404)


@dataclass(frozen=True)
class D6Client:
    version: str  # "v2" | "v1"
    base_url: str
    username: str
    password: str
    timeout_s: float = 10.0

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            "HTTP-X-USERNAME": self.username,
            "HTTP-X-PASSWORD": self.password,
        }

    def url_for(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """
        GET a D6 path and return the decoded JSON body.
        Raises RouteNotFound on 404 and UpstreamError on every other failure.
        """
        logger.debug("D6 %s request GET %s params=%s", self.version, path, params)
        try:
            resp = requests.get(
                self.url_for(path),
                params=params or None,
                headers=self._headers,
                timeout=self.timeout_s,
            )
        except requests.Timeout as e:
            raise UpstreamError(self.version, path, f"timed out after {self.timeout_s}s") from e
        except requests.RequestException as e:
            raise UpstreamError(self.version, path, f"{type(e).__name__}: {e}") from e

        logger.debug("D6 %s response %s for %s", self.version, resp.status_code, path)
        if resp.status_code == 404:
            raise RouteNotFound(self.version, path)
        if resp.status_code >= 300:
            raise UpstreamError(self.version, path, f"HTTP {resp.status_code}", status=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(self.version, path, "response was not JSON", status=resp.status_code) from e


def get_d6_clients(cfg: AppConfig) -> tuple[D6Client, D6Client]:
    """Returns (v2, v1) clients sharing credentials and timeout."""
    v2 = D6Client("v2", cfg.v2_base_url, cfg.d6_username, cfg.d6_password, cfg.request_timeout_s)
    v1 = D6Client("v1", cfg.v1_base_url, cfg.d6_username, cfg.d6_password, cfg.request_timeout_s)
    return v2, v1
