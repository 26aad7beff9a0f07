"""
services/wage_classifier.py
──────────────────────────────────────────────────────────────────────────────
Assigns a prevailing-wage level to every county for a salary.

Algorithm for one county:
  1. Look up the county's key in the occupation's wage table.
     Absent               → Classification(has_data=False)      "No data"
  2. Test thresholds IV, III, II, I in that order.  The first threshold that
     is defined and ≤ the hourly wage gives the level.
     None matches         → Classification(has_data=True)       "Below Level I"
  Undefined thresholds are skipped, never read as zero.

classify_all() converts the annual salary to hourly with HOURS_PER_YEAR and
returns a fresh ClassifiedView.  A salary that is not a finite number (a
cleared input included) aborts the pass: the previous view comes back
unchanged, so a transient input never blanks the map.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from wagemap.domain.constants import HOURS_PER_YEAR
from wagemap.domain.models import (
    Classification,
    ClassifiedRegion,
    ClassifiedView,
    RegionCollection,
    WageLevel,
    WageTable,
)

logger = logging.getLogger(__name__)

_HIGHEST_FIRST = sorted(WageLevel, reverse=True)

NO_DATA = Classification(has_data=False, level=None)


def classify(
    table: WageTable,
    key: Optional[str],
    hourly_wage: float,
) -> Classification:
    """Classify a single county.

    This is a *pure function* — deterministic, no side-effects, no I/O.

    Args:
        table:       Wage table for the selected occupation.
        key:         Region key ("CA|los angeles"); None for unmapped states.
        hourly_wage: Salary expressed per hour.

    Returns:
        Classification for the county.

    Examples:
        >>> t = WageTable.from_raw("x", {"CA|los angeles": {"I": 40, "II": 55, "III": 70, "IV": 90}})
        >>> classify(t, "CA|los angeles", 150000 / 2080).level
        <WageLevel.III: 3>
    """
    thresholds = table.get(key) if key is not None else None
    if thresholds is None:
        return NO_DATA

    for level in _HIGHEST_FIRST:
        threshold = thresholds.for_level(level)
        if threshold is None or not math.isfinite(threshold):
            continue
        if hourly_wage >= threshold:
            return Classification(has_data=True, level=level)
    return Classification(has_data=True, level=None)


def is_valid_salary(annual_salary: Optional[float]) -> bool:
    return (
        annual_salary is not None
        and not isinstance(annual_salary, bool)
        and isinstance(annual_salary, (int, float))
        and math.isfinite(annual_salary)
    )


def classify_all(
    table: WageTable,
    regions: RegionCollection,
    annual_salary: Optional[float],
    previous: Optional[ClassifiedView] = None,
) -> Optional[ClassifiedView]:
    """Classify every region for an annual salary.

    Inputs are never mutated; each call returns a new view.

    Args:
        table:         Wage table for the selected occupation.
        regions:       The base region collection.
        annual_salary: Yearly salary in USD; None when the input is cleared.
        previous:      View to hand back when the pass is aborted.

    Returns:
        New ClassifiedView, or ``previous`` unchanged when the salary is not
        a finite number.
    """
    if not is_valid_salary(annual_salary):
        logger.debug("Classification skipped | salary=%r is not a finite number", annual_salary)
        return previous

    hourly = annual_salary / HOURS_PER_YEAR
    classified = tuple(
        ClassifiedRegion(
            region=region,
            classification=classify(table, region.wage_key, hourly),
        )
        for region in regions.features
    )
    logger.debug(
        "Classified %d regions | occupation=%s salary=%.2f hourly=%.2f",
        len(classified),
        table.occupation_key,
        annual_salary,
        hourly,
    )
    return ClassifiedView(regions=classified, table=table, annual_salary=float(annual_salary))


def unclassified_view(regions: RegionCollection) -> ClassifiedView:
    """View shown before any wage table has arrived: every region "No data"."""
    return ClassifiedView(
        regions=tuple(
            ClassifiedRegion(region=region, classification=NO_DATA)
            for region in regions.features
        )
    )
