from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://integrate.d6plus.co.za/api/v2"
USER_AGENT = "d6bridge/0.1.0"


@dataclass(frozen=True)
class AppConfig:
    # Upstream (D6). Without credentials every upstream call fails and fallback kicks in.
    d6_base_url: str
    d6_username: str
    d6_password: str
    request_timeout_s: float

    # Tier selection
    enable_mock_data: bool
    use_mock_data_first: bool
    sandbox_applies_to_fresh: bool

    # Freshness (seconds)
    real_data_ttl_s: int
    mock_data_ttl_s: int

    probe_lookup_type: str

    # Cache backend: "memory" | "redis"
    cache_backend: str
    redis_url: Optional[str]
    cache_prefix: str

    log_level: str

    @property
    def v2_base_url(self) -> str:
        return self.d6_base_url.rstrip("/")

    @property
    def v1_base_url(self) -> str:
        # Same host, older API surface
        return self.v2_base_url.replace("/v2", "/v1")

    @property
    def has_credentials(self) -> bool:
        return bool(self.d6_username and self.d6_password)


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name, default)
    if v is None:
        return None
    v = v.strip()
    return v if v else None


def _getbool(name: str, default: bool) -> bool:
    return (_getenv(name, "true" if default else "false") or "").lower() in ("1", "true", "yes", "on")


def get_config() -> AppConfig:
    """
    Centralized config: this is the ONLY place env vars are read.
    - Loads `.env` if present (local dev)
    - Raises ValueError when the TTL policy is inverted
    """
    load_dotenv(override=False)

    cfg = AppConfig(
        d6_base_url=_getenv("D6_API_BASE_URL", DEFAULT_BASE_URL) or DEFAULT_BASE_URL,
        d6_username=_getenv("D6_API_USERNAME") or "",
        d6_password=_getenv("D6_API_PASSWORD") or "",
        request_timeout_s=float(_getenv("D6_REQUEST_TIMEOUT", "10") or "10"),
        enable_mock_data=_getbool("D6_ENABLE_MOCK_DATA", True),
        use_mock_data_first=_getbool("D6_SANDBOX_MODE", False),
        sandbox_applies_to_fresh=_getbool("D6_SANDBOX_APPLIES_TO_FRESH", True),
        real_data_ttl_s=int(_getenv("D6_REAL_DATA_TTL", "600") or "600"),
        mock_data_ttl_s=int(_getenv("D6_MOCK_DATA_TTL", "300") or "300"),
        probe_lookup_type=_getenv("D6_PROBE_LOOKUP", "genders") or "genders",
        cache_backend=(_getenv("CACHE_BACKEND", "memory") or "memory").lower(),
        redis_url=_getenv("REDIS_URL"),
        cache_prefix=_getenv("CACHE_PREFIX", "d6:") or "d6:",
        log_level=(_getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
    )

    if cfg.mock_data_ttl_s >= cfg.real_data_ttl_s:
        raise ValueError(
            f"D6_MOCK_DATA_TTL ({cfg.mock_data_ttl_s}s) must be shorter than "
            f"D6_REAL_DATA_TTL ({cfg.real_data_ttl_s}s)"
        )
    if cfg.cache_backend not in ("memory", "redis"):
        raise ValueError(f"Unknown CACHE_BACKEND: {cfg.cache_backend}")
    if cfg.cache_backend == "redis" and not cfg.redis_url:
        raise ValueError("CACHE_BACKEND=redis requires REDIS_URL")

    return cfg


def configure_logging(cfg: AppConfig) -> None:
    """Entry points only. Library modules just use logging.getLogger(__name__)."""
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
