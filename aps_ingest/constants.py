from __future__ import annotations

import re
from typing import Dict, Tuple


MONTH_NAMES: Tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

# A month token must not continue a word ("Summary" is not March).
MONTH_PATTERN = re.compile(
    r"(?<![A-Za-z])(" + "|".join(MONTH_NAMES) + r")",
    re.IGNORECASE,
)
YEAR_PATTERN = re.compile(r"\d{4}")

CASE_DATE_DAY = 15

HEADER_SENTINELS = frozenset({"ID", "HN"})

# Field name -> spreadsheet column letter.
COLUMN_KEYS: Dict[str, str] = {
    "case_id": "A",
    "age": "E",
    "patient_type": "F",
    "payer": "G",
    "gender": "H",
    "nationality": "I",
    "post_op_pain_mgmt": "J",
    "specialty": "M",
    "trauma_type": "O",
    "rest_baseline": "R",
    "rest_24h": "T",
    "movement_24h": "U",
    "freq_rest_24h": "V",
    "rest_48h": "W",
    "movement_48h": "X",
    "rest_72h": "Y",
    "movement_72h": "Z",
    "freq_rest_72h": "AA",
    "opioids": "AB",
    "non_opioids": "AC",
    "adjuvants": "AD",
    "drug_groups": "AE",
    "freq_movement_72h": "AF",
    "pain_discharge": "AH",
    "ae_nausea_vomiting": "AO",
    "ae_sedation": "AP",
    "ae_pruritus": "AQ",
    "ae_urinary_retention": "AR",
    "ae_dizziness": "AS",
    "ae_hypotension": "AT",
    "ae_respiratory_depression": "AU",
    "satisfaction": "AW",
    "proms": "AX",
    "feedback": "AY",
}

# The movement 24h frequency shares its source column with the 72h movement score.
FREQ_MOVEMENT_24H_COLUMN = "Z"

# Evaluated in order; the first keyword found in a cell decides that cell.
OPERATION_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("NON OPERATION", "Non operation"),
    ("NON ELECTIVE", "Non Elective OR"),
    ("ELECTIVE", "Elective OR"),
)

ORTHO_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("NON TRAUMA", "NON TRAUMA"),
    ("TRAUMA", "TRAUMA"),
)

FLAG_TRUE_TEXT = "Y"

DEFAULT_SATISFACTION_SCORE = 5.0
DEFAULT_PROMS_IMPROVEMENT = 0.0
UNKNOWN_DRUG_GROUP = "Unknown"
