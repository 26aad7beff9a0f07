"""
services/formatting.py
──────────────────────────────────────────────────────────────────────────────
Currency parsing and formatting for salary input and popup salary floors.
"""
from __future__ import annotations

import math
import re
from typing import Optional

from wagemap.domain.constants import PLACEHOLDER_DASH
from wagemap.domain.exceptions import InvalidSalaryError

_STRIP = re.compile(r"[,\s]")


def parse_currency(raw: object) -> Optional[float]:
    """Parse salary text such as "150,000" or "$95000".

    Returns:
        The amount, or None when the input is empty (an explicit clear).

    Raises:
        InvalidSalaryError: If the text is not a finite number.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        value = float(raw)
    else:
        text = _STRIP.sub("", str(raw))
        if text.startswith("$"):
            text = text[1:]
        if not text:
            return None
        try:
            value = float(text)
        except ValueError as exc:
            raise InvalidSalaryError(f"Not a salary: {raw!r}") from exc
    if not math.isfinite(value):
        raise InvalidSalaryError(f"Not a salary: {raw!r}")
    return value


def format_currency(value: Optional[float]) -> str:
    """150000 → "150,000"; None → ""."""
    if value is None:
        return ""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_annual_to_k(value: Optional[float]) -> str:
    """Annual amount rounded to the nearest thousand: 145600 → "$146K"."""
    if value is None or not math.isfinite(value):
        return PLACEHOLDER_DASH
    return f"${round_half_up(value / 1000):,}K"
