"""
domain/constants.py
──────────────────────────────────────────────────────────────────────────────
Static reference tables shared by the classifier, the popup builder and the
state machine.  Nothing here is tuneable at runtime; tuneable values live in
config/settings.py.
"""
from __future__ import annotations

# 40 hours/week × 52 weeks
HOURS_PER_YEAR: int = 2080

# (min_lng, min_lat, max_lng, max_lat) of the contiguous United States
USA_BOUNDS: tuple[float, float, float, float] = (-125.0, 24.0, -66.0, 50.0)

# Two-digit census FIPS state code → USPS abbreviation.
# Territories other than Puerto Rico have no wage data and are left out.
STATE_FP_TO_ABBR: dict[str, str] = {
    "01": "AL", "02": "AK", "04": "AZ", "05": "AR", "06": "CA",
    "08": "CO", "09": "CT", "10": "DE", "11": "DC", "12": "FL",
    "13": "GA", "15": "HI", "16": "ID", "17": "IL", "18": "IN",
    "19": "IA", "20": "KS", "21": "KY", "22": "LA", "23": "ME",
    "24": "MD", "25": "MA", "26": "MI", "27": "MN", "28": "MS",
    "29": "MO", "30": "MT", "31": "NE", "32": "NV", "33": "NH",
    "34": "NJ", "35": "NM", "36": "NY", "37": "NC", "38": "ND",
    "39": "OH", "40": "OK", "41": "OR", "42": "PA", "44": "RI",
    "45": "SC", "46": "SD", "47": "TN", "48": "TX", "49": "UT",
    "50": "VT", "51": "VA", "53": "WA", "54": "WV", "55": "WI",
    "56": "WY", "72": "PR",
}

# Choropleth fill per wage level, plus the fill for regions with no level.
LEVEL_COLORS: dict[int, str] = {
    1: "#FEF3C7",
    2: "#F59E0B",
    3: "#8B5CF6",
    4: "#4C1D95",
}
UNCLASSIFIED_FILL: str = "#F3F4F6"

# Badge dot shown in the popup when the region has no level.
UNCLASSIFIED_BADGE: str = "#d1d5db"

# Published H-1B registration selection odds (%) under the weighted lottery,
# per wage level.
LOTTERY_YEAR: int = 2027
LOTTERY_SELECTION_ODDS: dict[int, float] = {
    1: 15.29,
    2: 30.58,
    3: 45.87,
    4: 61.16,
}

# Rendered in place of a salary floor or probability that is not defined.
PLACEHOLDER_DASH: str = "—"
