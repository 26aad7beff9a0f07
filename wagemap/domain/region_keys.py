"""
domain/region_keys.py
──────────────────────────────────────────────────────────────────────────────
Wage-table key construction.

A wage table is keyed by "<state abbr>|<normalized county name>".  The same
normalize_region_name() must run when a table is built and when a region is
looked up, otherwise lookups miss silently and every county reads "No data".

  "Los Angeles County"   → "los angeles"
  "LOS ANGELES  county"  → "los angeles"
  "los angeles"          → "los angeles"
"""
from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
_TRAILING_COUNTY = re.compile(r"\s+county$")


def normalize_region_name(name: str) -> str:
    """Case-fold, collapse whitespace and drop one trailing "county" token."""
    folded = _WHITESPACE.sub(" ", name.casefold()).strip()
    return _TRAILING_COUNTY.sub("", folded)


def region_key(state_abbr: str, name: str) -> str:
    """Build the wage-table key for a county in a state.

    Examples:
        >>> region_key("CA", "Los Angeles County")
        'CA|los angeles'
    """
    return f"{state_abbr.strip().upper()}|{normalize_region_name(name)}"
