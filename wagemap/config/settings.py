"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Data-source, fetch-pool, initial-selection and zoom parameters.

Every field reads an environment variable when Settings() is built; a .env
at the repository root is loaded first.  Instances are frozen.

To swap data sources, change the relevant env var — no code edits required:
  DATA_PROVIDER   → "file" (local data directory) or "http"
  DATA_DIR        → where counties.geojson, soc_codes.json and soc/ live
  DATA_BASE_URL   → origin serving the same layout over HTTP
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Repository-root .env; real environment variables take precedence
load_dotenv(Path(__file__).parent.parent.parent / ".env")


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _env_path(key: str, default: Path) -> Path:
    return Path(os.getenv(key, str(default)))


@dataclass(frozen=True)
class Settings:
    """Process settings.  Pass explicit values in tests; read env otherwise."""

    # ── Data provider ──────────────────────────────────────────────────────
    # Valid values: "file" | "http"
    data_provider: str = field(
        default_factory=lambda: _env("DATA_PROVIDER", "file")
    )
    data_dir: Path = field(
        default_factory=lambda: _env_path(
            "DATA_DIR",
            Path(__file__).parent.parent.parent / "data",
        )
    )
    data_base_url: str = field(
        default_factory=lambda: _env("DATA_BASE_URL", "")
    )

    # ── HTTP ───────────────────────────────────────────────────────────────
    http_timeout: int = field(default_factory=lambda: _env_int("HTTP_TIMEOUT", 15))

    # ── Wage-table fetches ─────────────────────────────────────────────────
    fetch_workers: int = field(default_factory=lambda: _env_int("FETCH_WORKERS", 4))

    # ── Initial selection ──────────────────────────────────────────────────
    default_occupation: str = field(
        default_factory=lambda: _env("DEFAULT_OCCUPATION", "11-1011")
    )
    default_salary: float = field(
        default_factory=lambda: _env_float("DEFAULT_SALARY", 150000.0)
    )

    # ── Zoom requests sent to the rendering surface ────────────────────────
    zoom_duration_ms: int = field(
        default_factory=lambda: _env_int("ZOOM_DURATION_MS", 600)
    )
    zoom_padding: int = field(default_factory=lambda: _env_int("ZOOM_PADDING", 30))
    county_max_zoom: int = field(
        default_factory=lambda: _env_int("COUNTY_MAX_ZOOM", 8)
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """The process-wide Settings, built from the environment on first call.

    services/container.py compares against this instance to decide whether
    the cached data source can be reused.
    """
    return Settings()
