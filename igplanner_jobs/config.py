"""Configuration helpers for the job client."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


DEFAULT_API_BASE_URL = "https://ig-planner-backend.onrender.com"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass
class Settings:
    """Centralized environment-driven configuration.

    Values are read when the class body executes, so tests that tweak the
    environment reload this module to pick them up.
    """

    api_base_url: str = os.getenv("IGPLANNER_API_BASE_URL", DEFAULT_API_BASE_URL)
    request_timeout: float = _env_float("IGPLANNER_REQUEST_TIMEOUT", 20.0)
    poll_interval: float = _env_float("IGPLANNER_POLL_INTERVAL", 2.0)
    poll_deadline: float = _env_float("IGPLANNER_POLL_DEADLINE", 300.0)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance to avoid repeated environment reads."""

    return Settings()


settings = get_settings()


def normalize_base_url(base_url: Optional[str] = None) -> str:
    """Validate and strip a backend base URL, falling back to settings."""

    raw_base = (base_url or settings.api_base_url or "").strip()
    if not raw_base:
        raise RuntimeError("IGPLANNER_API_BASE_URL missing; set the backend URL")
    if not raw_base.startswith(("http://", "https://")):
        raise RuntimeError("IGPLANNER_API_BASE_URL must include http/https scheme")
    return raw_base.rstrip("/")


def configure_logging(level: Optional[str] = None) -> None:
    """Apply a basic logging setup using the configured level."""

    resolved = getattr(logging, (level or settings.log_level or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=resolved)
    # Per-request httpx lines drown out poll progress at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
