"""
services/location_index.py
──────────────────────────────────────────────────────────────────────────────
State and county lookup indices for the location pickers and for zooming.

Built once per region collection.  Regions whose numeric state code has no
abbreviation in STATE_FP_TO_ABBR are left out of every index; this is not an
error.
"""
from __future__ import annotations

import logging
import unicodedata
from collections import defaultdict
from dataclasses import dataclass, field

from wagemap.domain.models import CountyOption, RegionCollection, RegionFeature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationIndex:
    """Lookup tables derived from the region collection."""

    state_abbrevs: tuple[str, ...] = ()
    by_state: dict[str, tuple[CountyOption, ...]] = field(default_factory=dict)
    by_id: dict[str, RegionFeature] = field(default_factory=dict)

    def counties_in(self, state_abbr: str) -> tuple[CountyOption, ...]:
        return self.by_state.get(state_abbr, ())

    def regions_in(self, state_abbr: str) -> list[RegionFeature]:
        return [self.by_id[c.id] for c in self.counties_in(state_abbr)]


def _collation_key(name: str) -> tuple[str, str]:
    """Locale-style ordering: accents and case ignored first, then exact text."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name


def build_location_index(regions: RegionCollection) -> LocationIndex:
    """Build state/county indices from the region collection.

    Returns:
        LocationIndex with sorted state abbreviations, per-state county lists
        sorted by name, and an id → RegionFeature map.
    """
    by_state: dict[str, list[CountyOption]] = defaultdict(list)
    by_id: dict[str, RegionFeature] = {}
    skipped = 0

    for region in regions.features:
        abbr = region.state_abbr
        if abbr is None:
            skipped += 1
            continue
        by_id[region.id] = region
        by_state[abbr].append(CountyOption(name=region.name, id=region.id))

    index = LocationIndex(
        state_abbrevs=tuple(sorted(by_state)),
        by_state={
            abbr: tuple(sorted(options, key=lambda o: _collation_key(o.name)))
            for abbr, options in by_state.items()
        },
        by_id=by_id,
    )
    logger.debug(
        "Location index built | states=%d regions=%d skipped_unmapped=%d",
        len(index.state_abbrevs),
        len(by_id),
        skipped,
    )
    return index
