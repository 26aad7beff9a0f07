"""
adapters/local_data.py
──────────────────────────────────────────────────────────────────────────────
Implements RegionSourcePort, WageTablePort and OccupationDirectoryPort by
reading a local data directory laid out exactly like the published site:

  <DATA_DIR>/counties.geojson
  <DATA_DIR>/data/soc_codes.json
  <DATA_DIR>/data/soc/<parent key>.json

To enable:
  Set DATA_PROVIDER=file (the default) and DATA_DIR in your .env file.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from wagemap.config.settings import Settings
from wagemap.domain.exceptions import DataSourceError, WageDataError
from wagemap.domain.models import OccupationEntry, RegionCollection, WageTable

logger = logging.getLogger(__name__)

REGIONS_PATH = "counties.geojson"
OCCUPATIONS_PATH = "data/soc_codes.json"
WAGE_TABLE_DIR = "data/soc"

# Parent keys look like "15-1252" or "15-1250"; anything else could escape DATA_DIR.
_SAFE_KEY = re.compile(r"[A-Za-z0-9._-]+")


class LocalDataAdapter:
    """Filesystem-backed data source.

    Injected via services/container.py when ``DATA_PROVIDER=file``.
    """

    def __init__(self, settings: Settings) -> None:
        self._root = Path(settings.data_dir)
        logger.debug("LocalDataAdapter ready | root=%s", self._root)

    # ── RegionSourcePort ───────────────────────────────────────────────────

    def load_regions(self) -> RegionCollection:
        data = self._read_json(self._root / REGIONS_PATH, DataSourceError)
        try:
            regions = RegionCollection.from_geojson(data)
        except (KeyError, TypeError, AttributeError, ValidationError) as exc:
            raise DataSourceError(f"Malformed region collection: {exc}") from exc
        logger.info("Loaded %d regions from %s", len(regions), self._root / REGIONS_PATH)
        return regions

    # ── WageTablePort ──────────────────────────────────────────────────────

    def fetch_table(self, occupation_key: str) -> WageTable:
        if not _SAFE_KEY.fullmatch(occupation_key):
            raise WageDataError(f"Invalid occupation key: {occupation_key!r}")
        path = self._root / WAGE_TABLE_DIR / f"{occupation_key}.json"
        raw = self._read_json(path, WageDataError)
        if not isinstance(raw, dict):
            raise WageDataError(f"Wage table {path} is not a JSON object")
        try:
            table = WageTable.from_raw(occupation_key, raw)
        except (AttributeError, ValidationError) as exc:
            raise WageDataError(f"Malformed wage table {path}: {exc}") from exc
        logger.debug("Read wage table %s | entries=%d", occupation_key, len(table))
        return table

    # ── OccupationDirectoryPort ────────────────────────────────────────────

    def load_occupations(self) -> list[OccupationEntry]:
        raw = self._read_json(self._root / OCCUPATIONS_PATH, DataSourceError)
        try:
            return [OccupationEntry.model_validate(item) for item in raw]
        except (TypeError, ValidationError) as exc:
            raise DataSourceError(f"Malformed occupation directory: {exc}") from exc

    # ── Private helpers ────────────────────────────────────────────────────

    @staticmethod
    def _read_json(path: Path, error: type[DataSourceError]) -> Any:
        try:
            with path.open(encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError as exc:
            raise error(f"Data file not found: {path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise error(f"Could not read {path}: {exc}") from exc
