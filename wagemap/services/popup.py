"""
services/popup.py
──────────────────────────────────────────────────────────────────────────────
Builds the county popup payload from a classified region.

The output is plain data (PopupContent) — which renderer draws it, and how,
is not this module's concern.

Popup layout:
  title           "Los Angeles, CA"
  badge           label ("Level III" / "Below Level I" / "No data") + color
  level rows      L I … L IV with the annual salary floor of each level
                  (hourly threshold × 2080, "$146K+"), plus the lottery
                  selection probability when the overlay is on
  selection line  only when the overlay is on and the current level has odds
"""
from __future__ import annotations

import math
from collections import Counter
from typing import Optional

from wagemap.domain.constants import (
    HOURS_PER_YEAR,
    LEVEL_COLORS,
    LOTTERY_SELECTION_ODDS,
    LOTTERY_YEAR,
    PLACEHOLDER_DASH,
    UNCLASSIFIED_BADGE,
)
from wagemap.domain.models import (
    Classification,
    ClassifiedRegion,
    ClassifiedView,
    LevelRow,
    PopupContent,
    WageLevel,
    WageTable,
)
from wagemap.services.formatting import format_annual_to_k

NO_DATA_LABEL = "No data"
BELOW_LEVEL_I_LABEL = "Below Level I"


def level_label(classification: Classification) -> str:
    if not classification.has_data:
        return NO_DATA_LABEL
    if classification.level is None:
        return BELOW_LEVEL_I_LABEL
    return f"Level {classification.level.roman}"


def salary_floor(hourly_threshold: Optional[float]) -> str:
    """Annual floor for an hourly threshold, or a dash when undefined."""
    if hourly_threshold is None or not math.isfinite(hourly_threshold):
        return PLACEHOLDER_DASH
    return f"{format_annual_to_k(hourly_threshold * HOURS_PER_YEAR)}+"


def build_popup_content(
    region: ClassifiedRegion,
    table: Optional[WageTable],
    lottery_enabled: bool,
) -> PopupContent:
    """Derive popup content for one classified county.

    Args:
        region:          The county and its classification in the current view.
        table:           Wage table the classification came from; None before
                         any table has arrived.
        lottery_enabled: Whether to add lottery selection odds.

    Returns:
        PopupContent ready to hand to the rendering surface.
    """
    feature = region.region
    level = region.level
    thresholds = (
        table.get(feature.wage_key)
        if table is not None and feature.wage_key is not None
        else None
    )

    rows = [
        LevelRow(
            level=row_level,
            label=f"L {row_level.roman}",
            salary_floor=salary_floor(
                thresholds.for_level(row_level) if thresholds else None
            ),
            probability=LOTTERY_SELECTION_ODDS.get(int(row_level)) if lottery_enabled else None,
            is_active=row_level == level,
        )
        for row_level in WageLevel
    ]

    chance = LOTTERY_SELECTION_ODDS.get(int(level)) if level is not None else None
    selection_line = None
    if lottery_enabled and chance is not None:
        selection_line = (
            f"You have a {chance}% probability of being selected to file "
            f"an H-1B petition in {LOTTERY_YEAR}."
        )

    abbr = feature.state_abbr
    return PopupContent(
        region_id=feature.id,
        title=f"{feature.name}, {abbr}" if abbr else feature.name,
        label=level_label(region.classification),
        color_key=int(level) if level is not None else None,
        color=LEVEL_COLORS[level] if level is not None else UNCLASSIFIED_BADGE,
        level_rows=rows,
        lottery_enabled=lottery_enabled,
        lottery_note=f"Chances in the {LOTTERY_YEAR} lottery." if lottery_enabled else None,
        selection_line=selection_line,
    )


def summarize_levels(
    view: ClassifiedView,
    state_abbr: Optional[str] = None,
) -> dict[str, int]:
    """Count counties per popup label, optionally within one state.

    Returns:
        Ordered dict: Level IV … Level I, Below Level I, No data.
    """
    counts = Counter(
        level_label(r.classification)
        for r in view.regions
        if state_abbr is None or r.region.state_abbr == state_abbr
    )
    order = [f"Level {lvl.roman}" for lvl in sorted(WageLevel, reverse=True)]
    order += [BELOW_LEVEL_I_LABEL, NO_DATA_LABEL]
    return {label: counts.get(label, 0) for label in order}
