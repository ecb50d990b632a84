# tests/test_report.py
"""
Tests for assembling the report sections from a dataset and selection.
"""

import pytest

from aps_analytics.constants import ALL
from aps_analytics.filtering import CasePredicate, Selection
from aps_analytics.report import ReportConfig, build_report
from aps_ingest import load_sheets
from aps_ingest.models import Gender


# ---- Test Fixtures ----
@pytest.fixture
def dataset(sample_sheets):
    """
    Dataset loaded from the shared sample sheets.
    """
    return load_sheets(sample_sheets)


def test_report_has_every_section(dataset):
    report = build_report(dataset, Selection(2025, ALL))
    assert list(report.sections) == [
        "Overview",
        "Patient Profile",
        "Pain Management",
        "Pain Assessment",
        "Medication",
        "Effectiveness",
        "Safety",
        "Experience",
        "Detailed Records",
    ]


def test_kpis_follow_month_selection(dataset):
    report = build_report(dataset, Selection(2025, 0))
    assert report.kpis.total_cases == 2
    assert report.kpis.complication_rate.rate == 50.0
    records = report.frame("Detailed Records", "Detailed Case Records")
    assert list(records["ID"]) == ["P001", "P002"]


def test_trends_use_whole_year(dataset):
    report = build_report(dataset, Selection(2025, 0))
    trend = report.frame("Overview", "Pain Trends (Rest)")
    assert list(trend["name"]) == ["Jan", "Feb"]


def test_predicate_applies_to_every_view(dataset):
    predicate = CasePredicate("patient_gender", Gender.MALE)
    report = build_report(dataset, Selection(2025, ALL, predicate))
    assert report.kpis.total_cases == 2
    genders = report.frame("Patient Profile", "Gender Distribution")
    assert dict(zip(genders["name"], genders["value"])) == {"Male": 2, "Female": 0}


def test_effectiveness_uses_configured_targets(dataset):
    config = ReportConfig(severe_pain_targets={"freq_rest_24h": 20})
    report = build_report(dataset, Selection(2025, ALL), config)
    frames = report.sections["Effectiveness"]
    assert len(frames) == 1
    (frame,) = frames.values()
    assert list(frame["Rate (%)"]) == [0.0, 100.0]
    assert (frame["Target (%)"] == 20.0).all()


def test_pain_assessment_by_operation_type(dataset):
    frames = build_report(dataset, Selection(2025, ALL)).sections["Pain Assessment"]
    assert "Pain Trends (Rest) - Elective OR" in frames
    assert "Pain Trends (Movement) - Non operation" in frames
    elective = frames["Pain Trends (Rest) - Elective OR"]
    assert list(elective["name"]) == ["Jan"]
    assert elective.iloc[0]["24h"] == 6.0


def test_selection_dict(dataset):
    predicate = CasePredicate("specialty", "Urology")
    report = build_report(dataset, Selection(2024, 11, predicate))
    assert report.selection_dict() == {"Year": 2024, "Month": 11, "Filter": "specialty = Urology"}


def test_selection_dict_renders_enum_values(dataset):
    predicate = CasePredicate("patient_gender", Gender.FEMALE)
    report = build_report(dataset, Selection(2025, ALL, predicate))
    assert report.selection_dict()["Filter"] == "patient_gender = Female"
