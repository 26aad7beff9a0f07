"""
adapters/http_data.py
──────────────────────────────────────────────────────────────────────────────
Implements RegionSourcePort, WageTablePort and OccupationDirectoryPort over
HTTP using raw requests against the static site that publishes the data:

  GET <DATA_BASE_URL>/counties.geojson
  GET <DATA_BASE_URL>/data/soc_codes.json
  GET <DATA_BASE_URL>/data/soc/<parent key>.json

Key behaviour:
  - One attempt per request.  A failed wage-table fetch raises WageDataError
    and the state machine keeps the previous classification; there is no
    retry or back-off.
  - Every failure mode (connection error, non-2xx, invalid JSON, wrong
    shape) is mapped onto the domain exception hierarchy.

Required env vars:
  DATA_BASE_URL   — e.g. https://wagemap.example.org
  HTTP_TIMEOUT    — default: 15 seconds

To enable:
  Set DATA_PROVIDER=http in your .env file.
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests
from pydantic import ValidationError

from wagemap.config.settings import Settings
from wagemap.domain.exceptions import ConfigurationError, DataSourceError, WageDataError
from wagemap.domain.models import OccupationEntry, RegionCollection, WageTable

logger = logging.getLogger(__name__)


class HttpDataAdapter:
    """HTTP-backed data source.

    Injected via services/container.py when ``DATA_PROVIDER=http``.
    """

    def __init__(self, settings: Settings) -> None:
        if not settings.data_base_url:
            raise ConfigurationError(
                "DATA_BASE_URL is not set. "
                "Add it to your .env file or environment."
            )
        self._base_url = settings.data_base_url.rstrip("/")
        self._timeout = settings.http_timeout
        self._headers = {"Accept": "application/json"}
        logger.debug(
            "HttpDataAdapter ready | base_url=%s timeout=%ds",
            self._base_url,
            self._timeout,
        )

    # ── RegionSourcePort ───────────────────────────────────────────────────

    def load_regions(self) -> RegionCollection:
        data = self._get_json("counties.geojson", DataSourceError)
        try:
            regions = RegionCollection.from_geojson(data)
        except (KeyError, TypeError, AttributeError, ValidationError) as exc:
            raise DataSourceError(f"Malformed region collection: {exc}") from exc
        logger.info("Loaded %d regions from %s", len(regions), self._base_url)
        return regions

    # ── WageTablePort ──────────────────────────────────────────────────────

    def fetch_table(self, occupation_key: str) -> WageTable:
        path = f"data/soc/{quote(occupation_key, safe='')}.json"
        raw = self._get_json(path, WageDataError)
        if not isinstance(raw, dict):
            raise WageDataError(f"Wage table {occupation_key!r} is not a JSON object")
        try:
            table = WageTable.from_raw(occupation_key, raw)
        except (AttributeError, ValidationError) as exc:
            raise WageDataError(
                f"Malformed wage table {occupation_key!r}: {exc}"
            ) from exc
        logger.debug("Fetched wage table %s | entries=%d", occupation_key, len(table))
        return table

    # ── OccupationDirectoryPort ────────────────────────────────────────────

    def load_occupations(self) -> list[OccupationEntry]:
        raw = self._get_json("data/soc_codes.json", DataSourceError)
        try:
            return [OccupationEntry.model_validate(item) for item in raw]
        except (TypeError, ValidationError) as exc:
            raise DataSourceError(f"Malformed occupation directory: {exc}") from exc

    # ── Private helpers ────────────────────────────────────────────────────

    def _get_json(self, path: str, error: type[DataSourceError]) -> Any:
        """GET a JSON document, mapping every failure onto ``error``."""
        url = f"{self._base_url}/{path}"
        try:
            resp = requests.get(url, headers=self._headers, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.warning("GET %s failed: %s", url, exc)
            raise error(f"Request to {url} failed: {exc}") from exc

        if not resp.ok:
            raise error(f"GET {url} returned HTTP {resp.status_code}: {resp.text[:300]}")

        try:
            return resp.json()
        except ValueError as exc:
            raise error(f"GET {url} returned invalid JSON") from exc
