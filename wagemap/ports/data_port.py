"""
ports/data_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interfaces for the three published data sets.

  1. RegionSourcePort         — the county polygon collection (loaded once)
  2. WageTablePort            — one wage-threshold table per parent key
  3. OccupationDirectoryPort  — leaf occupation → parent key directory

Keeping them separate means the state machine only ever sees WageTablePort,
and tests can fake it with a dict.

Current implementations:
  LocalDataAdapter  (adapters/local_data.py)  — reads a data directory
  HttpDataAdapter   (adapters/http_data.py)   — fetches the same layout via requests
To swap: write a new adapter implementing these Protocols and change the
wiring in services/container.py.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from wagemap.domain.models import OccupationEntry, RegionCollection, WageTable


@runtime_checkable
class RegionSourcePort(Protocol):
    """Contract for loading the region collection."""

    def load_regions(self) -> RegionCollection:
        """Load every county feature.

        Returns:
            Immutable RegionCollection.

        Raises:
            DataSourceError: If the collection is missing or malformed.
        """
        ...


@runtime_checkable
class WageTablePort(Protocol):
    """Contract for fetching a wage-threshold table."""

    def fetch_table(self, occupation_key: str) -> WageTable:
        """Fetch the thresholds for one occupation parent key.

        Called from a worker thread; implementations must not touch
        session state.

        Args:
            occupation_key: Parent key from the occupation directory.

        Returns:
            WageTable with normalized region keys.

        Raises:
            WageDataError: On network, HTTP or JSON failure.
        """
        ...


@runtime_checkable
class OccupationDirectoryPort(Protocol):
    """Contract for loading the occupation directory."""

    def load_occupations(self) -> list[OccupationEntry]:
        """Load every leaf occupation.

        Raises:
            DataSourceError: If the directory is missing or malformed.
        """
        ...
