"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and mock adapter implementations.

Mock adapters implement the Port Protocols via structural subtyping — they do
NOT inherit from any base class.  pytest uses them to test service logic
without touching the filesystem or the network.

Fixture hierarchy:
  regions            → RegionCollection (CA, NY, NM counties + one unmapped)
  wage_source        → implements WageTablePort (in-memory raw tables)
  deferred_executor  → Executor whose tasks run only when the test says so
  renderer           → InMemoryMapRenderer (records boundary outputs)
  machine            → SelectionStateMachine wired with all of the above
  loaded_machine     → machine with the 15-1252 table applied
  data_dir           → tmp directory laid out like the published data site
"""
from __future__ import annotations

import copy
import json
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Callable

import pytest

from wagemap.adapters.memory_renderer import InMemoryMapRenderer
from wagemap.config.settings import Settings
from wagemap.domain.exceptions import WageDataError
from wagemap.domain.models import OccupationEntry, RegionCollection, WageTable
from wagemap.services.selection import SelectionStateMachine


# ── Fixture data ───────────────────────────────────────────────────────────

def _square(min_lng: float, min_lat: float, max_lng: float, max_lat: float) -> list:
    return [[
        [min_lng, min_lat],
        [max_lng, min_lat],
        [max_lng, max_lat],
        [min_lng, max_lat],
        [min_lng, min_lat],
    ]]


def _feature(geoid: str, statefp: Any, name: str, geometry: dict | None) -> dict:
    return {
        "type": "Feature",
        "properties": {"GEOID": geoid, "STATEFP": statefp, "NAME": name},
        "geometry": geometry,
    }


COUNTIES_GEOJSON: dict = {
    "type": "FeatureCollection",
    "features": [
        _feature("06037", "06", "Los Angeles",
                 {"type": "Polygon", "coordinates": _square(-118.9, 33.7, -117.6, 34.8)}),
        _feature("06001", "06", "Alameda",
                 {"type": "Polygon", "coordinates": _square(-122.4, 37.4, -121.5, 37.9)}),
        _feature("36047", "36", "Kings",
                 {"type": "MultiPolygon", "coordinates": [_square(-74.05, 40.57, -73.83, 40.74)]}),
        _feature("35015", "35", "Eddy",
                 {"type": "Polygon", "coordinates": _square(-104.9, 32.0, -103.6, 32.97)}),
        _feature("35013", "35", "Doña Ana",
                 {"type": "Polygon", "coordinates": _square(-107.3, 31.78, -106.2, 32.79)}),
        _feature("35001", "35", "Bernalillo",
                 {"type": "Polygon", "coordinates": _square(-107.2, 34.87, -106.15, 35.22)}),
        _feature("66010", "66", "Guam",
                 {"type": "Polygon", "coordinates": _square(144.6, 13.2, 145.0, 13.7)}),
    ],
}

# 15-1252: Los Angeles is keyed with the "County" suffix on purpose; the
# table builder must normalize it to "CA|los angeles".
WAGE_TABLES: dict[str, dict] = {
    "15-1252": {
        "CA|Los Angeles County": {"I": 40, "II": 55, "III": 70, "IV": 90},
        "CA|alameda": {"I": 45, "II": 60, "III": 75, "IV": 95},
        "NY|kings": {"I": 35, "III": 65},
    },
    "11-1011": {
        "CA|los angeles": {"I": 20, "II": 25, "III": 30, "IV": 35},
    },
}

OCCUPATIONS: list[dict] = [
    {"code": "15-1252", "title": "Software Developers", "parent": "15-1252"},
    {"code": "15-1253", "title": "Software Quality Assurance Analysts and Testers", "parent": "15-1252"},
    {"code": "11-1011", "title": "Chief Executives", "parent": "11-1011"},
]


# ── Mock adapters ──────────────────────────────────────────────────────────

class MockWageTableSource:
    """In-memory WageTablePort.  Keys listed in ``failing`` raise WageDataError."""

    def __init__(self, tables: dict[str, dict], failing: set[str] | None = None) -> None:
        self._tables = tables
        self.failing = failing or set()
        self.calls: list[str] = []

    def fetch_table(self, occupation_key: str) -> WageTable:
        self.calls.append(occupation_key)
        if occupation_key in self.failing or occupation_key not in self._tables:
            raise WageDataError(f"HTTP 404 for {occupation_key}")
        return WageTable.from_raw(occupation_key, self._tables[occupation_key])


class MockOccupationSource:
    def load_occupations(self) -> list[OccupationEntry]:
        return [OccupationEntry.model_validate(o) for o in OCCUPATIONS]


class DeferredExecutor:
    """Executor whose submitted tasks run only when run()/run_all() is called.

    Lets a test resolve wage-table fetches in any order.
    """

    def __init__(self) -> None:
        self.pending: list[tuple[Future, Callable, tuple, dict]] = []

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        future: Future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run(self, index: int = 0) -> None:
        future, fn, args, kwargs = self.pending.pop(index)
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:  # surfaced through future.result()
            future.set_exception(exc)

    def run_all(self) -> None:
        while self.pending:
            self.run(0)

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        self.pending.clear()


# ── Settings fixture ───────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def settings() -> Settings:
    """Return a Settings instance with sane test defaults."""
    return Settings(
        data_provider="file",
        data_dir=Path("/nonexistent"),
        data_base_url="",
        http_timeout=5,
        fetch_workers=2,
        default_occupation="15-1252",
        default_salary=150000.0,
        zoom_duration_ms=600,
        zoom_padding=30,
        county_max_zoom=8,
    )


# ── pytest fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def counties_geojson() -> dict:
    return copy.deepcopy(COUNTIES_GEOJSON)


@pytest.fixture
def raw_wage_tables() -> dict[str, dict]:
    return copy.deepcopy(WAGE_TABLES)


@pytest.fixture
def raw_occupations() -> list[dict]:
    return copy.deepcopy(OCCUPATIONS)


@pytest.fixture
def regions(counties_geojson) -> RegionCollection:
    return RegionCollection.from_geojson(counties_geojson)


@pytest.fixture
def table_a() -> WageTable:
    return WageTable.from_raw("15-1252", WAGE_TABLES["15-1252"])


@pytest.fixture
def wage_source() -> MockWageTableSource:
    return MockWageTableSource(copy.deepcopy(WAGE_TABLES))


@pytest.fixture
def occupation_source() -> MockOccupationSource:
    return MockOccupationSource()


@pytest.fixture
def deferred_executor() -> DeferredExecutor:
    return DeferredExecutor()


@pytest.fixture
def renderer() -> InMemoryMapRenderer:
    return InMemoryMapRenderer()


@pytest.fixture
def machine(regions, wage_source, renderer, settings, deferred_executor):
    m = SelectionStateMachine(
        regions=regions,
        wage_source=wage_source,
        renderer=renderer,
        settings=settings,
        executor=deferred_executor,
    )
    yield m
    m.close()


@pytest.fixture
def loaded_machine(machine, deferred_executor):
    """Machine with the 15-1252 table applied at a $150,000 salary."""
    machine.set_occupation("15-1252")
    deferred_executor.run_all()
    return machine


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """A data directory laid out like the published site."""
    (tmp_path / "data" / "soc").mkdir(parents=True)
    (tmp_path / "counties.geojson").write_text(json.dumps(COUNTIES_GEOJSON), encoding="utf-8")
    (tmp_path / "data" / "soc_codes.json").write_text(json.dumps(OCCUPATIONS), encoding="utf-8")
    for key, table in WAGE_TABLES.items():
        (tmp_path / "data" / "soc" / f"{key}.json").write_text(json.dumps(table), encoding="utf-8")
    return tmp_path


@pytest.fixture
def file_settings(data_dir) -> Settings:
    return Settings(
        data_provider="file",
        data_dir=data_dir,
        data_base_url="",
        http_timeout=5,
        fetch_workers=2,
        default_occupation="15-1252",
        default_salary=150000.0,
    )
