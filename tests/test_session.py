# tests/test_session.py
"""
Tests for the stateful analytics session.
"""

import pytest

from aps_analytics.constants import ALL
from aps_analytics.session import AnalyticsSession
from aps_ingest import NoValidDataError
from aps_ingest.models import Gender


# ---- Test Fixtures ----
@pytest.fixture
def session(sample_sheets):
    """
    Session with the sample sheets loaded.
    """
    session = AnalyticsSession()
    session.load_sheets(sample_sheets)
    return session


def test_load_selects_last_partition(session):
    # The last sheet in the sample workbook is "Dec 2024"
    assert (session.selection.year, session.selection.month) == (2024, 11)
    assert [c.id for c in session.filtered_cases()] == ["1001"]


def test_available_years_and_months(session):
    assert session.available_years() == [2025, 2024]
    session.select_year(2025)
    assert session.available_months() == [0, 1]


def test_select_year_resets_unavailable_month(session):
    selection = session.select_year(2025)
    assert (selection.year, selection.month) == (2025, ALL)


def test_select_unknown_year_falls_back_to_latest(session):
    assert session.select_year(1999).year == 2025


def test_select_month_requires_catalog_entry(session):
    session.select_year(2025)
    assert session.select_month(1).month == 1
    assert session.select_month(ALL).month == ALL
    with pytest.raises(ValueError):
        session.select_month(7)


def test_predicate_lifecycle(session):
    session.select_year(2025)
    session.apply_predicate("patient_gender", Gender.MALE)
    assert [c.id for c in session.filtered_cases()] == ["P002", "P003"]
    assert session.active_predicate.field == "patient_gender"

    session.apply_predicate("patient_gender", Gender.FEMALE)
    assert [c.id for c in session.filtered_cases()] == ["P001"]

    session.clear_predicate()
    assert session.active_predicate is None
    assert len(session.filtered_cases()) == 3


def test_year_cases_ignore_month(session):
    session.select_year(2025)
    session.select_month(0)
    assert len(session.filtered_cases()) == 2
    assert len(session.year_cases()) == 3


def test_failed_load_keeps_previous_dataset(session):
    before = session.dataset
    selection = session.selection
    with pytest.raises(NoValidDataError):
        session.load_sheets({"Summary 2025": [{"A": "P9", "E": 40}]})
    assert session.dataset is before
    assert session.selection == selection


def test_report_reflects_selection(session):
    session.select_year(ALL)
    session.select_month(ALL)
    assert session.report().kpis.total_cases == 4


def test_select_month_does_not_heal_explicit_request(session):
    session.select_year(2024)
    with pytest.raises(ValueError):
        session.select_month(0)
    assert session.selection.month == 11
