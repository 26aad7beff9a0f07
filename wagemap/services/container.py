"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

Provider selection is driven entirely by environment variables — no code
changes are needed to switch between data sources:

  DATA_PROVIDER=file  (default) → LocalDataAdapter   (reads DATA_DIR)
  DATA_PROVIDER=http            → HttpDataAdapter    (reads DATA_BASE_URL)

The rendering surface defaults to InMemoryMapRenderer; a caller with a live
map passes its own MapRendererPort to build_session(), and a server hosting
many sessions passes one shared fetch executor.

Sessions are NOT cached: each map view gets its own SelectionStateMachine.
The data source and the occupation directory are process-wide and cached.
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor
from functools import lru_cache
from typing import Optional

from wagemap.adapters.memory_renderer import InMemoryMapRenderer
from wagemap.config.settings import Settings, get_settings
from wagemap.domain.exceptions import ConfigurationError
from wagemap.domain.models import RegionCollection
from wagemap.ports.data_port import WageTablePort
from wagemap.ports.renderer_port import MapRendererPort
from wagemap.services.occupations import OccupationDirectory
from wagemap.services.selection import SelectionStateMachine

logger = logging.getLogger(__name__)


def build_data_source(settings: Settings) -> WageTablePort:
    """Instantiate the data adapter named by DATA_PROVIDER.

    Both adapters implement RegionSourcePort, WageTablePort and
    OccupationDirectoryPort.
    """
    provider = settings.data_provider.lower()
    if provider == "file":
        from wagemap.adapters.local_data import LocalDataAdapter
        logger.info("Data provider: local files (%s)", settings.data_dir)
        return LocalDataAdapter(settings)
    if provider == "http":
        from wagemap.adapters.http_data import HttpDataAdapter
        logger.info("Data provider: HTTP (%s)", settings.data_base_url)
        return HttpDataAdapter(settings)
    raise ConfigurationError(
        f"Unknown DATA_PROVIDER '{settings.data_provider}'. "
        "Valid values: 'file', 'http'."
    )


@lru_cache(maxsize=1)
def get_data_source() -> WageTablePort:
    return build_data_source(get_settings())


@lru_cache(maxsize=1)
def get_regions() -> RegionCollection:
    """Load the region collection once per process."""
    return get_data_source().load_regions()


@lru_cache(maxsize=1)
def get_occupation_directory() -> OccupationDirectory:
    return OccupationDirectory(get_data_source())


def build_session(
    renderer: Optional[MapRendererPort] = None,
    settings: Optional[Settings] = None,
    executor: Optional[Executor] = None,
) -> SelectionStateMachine:
    """Build a fully wired SelectionStateMachine.

    Args:
        renderer: Rendering surface; an InMemoryMapRenderer when omitted.
        settings: Defaults to get_settings().
        executor: Shared executor for wage-table fetches.  The session does
                  not shut it down; when omitted the session owns a private
                  pool that close() releases.

    Returns:
        A session with no wage table yet.  Call set_occupation() to load one.

    Raises:
        ConfigurationError: If DATA_PROVIDER is unknown or incomplete.
        DataSourceError:    If the region collection cannot be loaded.
    """
    settings = settings or get_settings()
    if settings is get_settings():
        source = get_data_source()
        regions = get_regions()
    else:
        source = build_data_source(settings)
        regions = source.load_regions()

    session = SelectionStateMachine(
        regions=regions,
        wage_source=source,
        renderer=renderer if renderer is not None else InMemoryMapRenderer(),
        settings=settings,
        executor=executor,
    )
    logger.info(
        "Session ready | provider=%s regions=%d",
        settings.data_provider,
        len(regions),
    )
    return session
