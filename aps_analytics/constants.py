from __future__ import annotations

from typing import Dict, Tuple


ALL = "All"

UNKNOWN_LABEL = "Unknown"
OTHER_LABEL = "Other"

# Breakdowns keep this many categories before folding the rest into "Other".
TOP_CATEGORY_LIMIT = 6

MEDICATION_RANKING_LIMIT = 10

SEVERE_PAIN_THRESHOLD = 3

PAIN_PERIODS: Tuple[str, ...] = ("24h", "48h", "72h")
PAIN_KINDS: Tuple[str, ...] = ("rest", "movement")

# Acceptable share of cases with repeated severe pain, in percent.
DEFAULT_SEVERE_PAIN_TARGETS: Dict[str, float] = {
    "freq_rest_24h": 10.0,
    "freq_movement_24h": 15.0,
    "freq_rest_72h": 10.0,
    "freq_movement_72h": 5.0,
}

SEVERE_PAIN_TITLES: Dict[str, str] = {
    "freq_rest_24h": "Severe Rest Pain Freq (24h)",
    "freq_movement_24h": "Severe Move Pain Freq (24h)",
    "freq_rest_72h": "Severe Rest Pain Freq (72h)",
    "freq_movement_72h": "Severe Move Pain Freq (72h)",
}

AGE_BANDS: Tuple[Tuple[float, str], ...] = (
    (30, "<30"),
    (50, "30-49"),
    (70, "50-69"),
)
OLDEST_AGE_BAND = "70+"

RATE_COLUMN = "Rate (%)"
SUCCESS_RATE_COLUMN = "Success Rate (%)"
TARGET_COLUMN = "Target (%)"
