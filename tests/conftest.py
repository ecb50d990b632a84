# tests/conftest.py
import os
import sys
from datetime import date
from typing import Dict, List

import pytest

# Make the root-level packages importable without an install
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from aps_ingest.constants import MONTH_NAMES  # noqa: E402
from aps_ingest.models import (  # noqa: E402
    Case,
    Gender,
    Nationality,
    OperationType,
    OrthoType,
    PatientType,
    PayerType,
    PostOpPainMgmt,
    Specialty,
    TraumaType,
)


def make_case(case_id: str = "P001", year: int = 2025, month: int = 0, **overrides) -> Case:
    """Build a Case with neutral defaults; ``month`` is zero-based."""
    values = dict(
        id=case_id,
        date=date(year, month + 1, 15),
        patient_age=45.0,
        patient_gender=Gender.FEMALE,
        patient_type=PatientType.NEW,
        payer=PayerType.LOCAL_SELFPAY,
        nationality=Nationality.THAI,
        trauma_type=TraumaType.OTHER,
        post_op_pain_mgmt=PostOpPainMgmt.IV_PCA,
        specialty=Specialty.ORTHO,
        operation_type=OperationType.NON_ELECTIVE,
        ortho_type=OrthoType.NON_TRAUMA,
        partition_label=f"{MONTH_NAMES[month]} {year}",
    )
    values.update(overrides)
    return Case(**values)


# ---- Test Fixtures ----
@pytest.fixture
def case_factory():
    """
    Fixture exposing the Case builder to tests.
    """
    return make_case


@pytest.fixture
def example_row() -> Dict[str, object]:
    """
    A single accepted row keyed by column letter.
    """
    return {"A": "P001", "E": 45, "H": "F", "T": 6, "W": 4, "R": 8}


@pytest.fixture
def sample_sheets() -> Dict[str, List[Dict[str, object]]]:
    """
    Three monthly sheets plus a summary sheet and header/blank rows.
    """
    return {
        "Jan 2025": [
            {"A": "HN", "E": "Age"},
            {"A": "P001", "E": 45, "H": "F", "T": 6, "W": 4, "R": 8, "N": "Elective", "P": "TRAUMA"},
            {"A": "P002", "E": 72, "H": "M", "T": 2, "R": 8, "AO": "Y", "AB": "Morphine, Fentanyl"},
        ],
        "Feb 2025": [
            {"A": "P003", "E": 28, "H": "Male", "T": 4, "U": 6, "V": 3, "AW": 4, "AX": 20},
            {"A": "", "E": 50},
            {"A": "P004", "E": "unknown"},
        ],
        "Summary 2025": [
            {"A": "TOTAL", "E": 3},
        ],
        "Dec 2024": [
            {"A": 1001.0, "E": 60, "H": "F", "I": "THAI", "AT": 1},
        ],
    }
