# tests/test_filtering.py
"""
Tests for the selection engine and catalog reconciliation.
"""

import pytest

from aps_analytics.constants import ALL
from aps_analytics.filtering import (
    CasePredicate,
    Selection,
    apply_selection,
    available_months,
    available_years,
    filter_cases,
    reconcile_selection,
)
from aps_ingest.models import Gender, Partition, Specialty


# ---- Test Fixtures ----
@pytest.fixture
def cases(case_factory):
    """
    Cases spread over two years and three months.
    """
    return [
        case_factory("P1", 2025, 0, patient_gender=Gender.MALE),
        case_factory("P2", 2025, 0),
        case_factory("P3", 2025, 1, specialty=Specialty.UROLOGY),
        case_factory("P4", 2024, 11, patient_gender=Gender.MALE),
    ]


@pytest.fixture
def partitions():
    """
    Catalog matching the cases fixture.
    """
    return [
        Partition("Jan 2025", 0, 2025, 2),
        Partition("Feb 2025", 1, 2025, 1),
        Partition("Dec 2024", 11, 2024, 1),
    ]


# ---- Filtering ----
def test_all_selection_is_identity(cases):
    assert filter_cases(cases) == cases
    assert apply_selection(cases, Selection()) == cases


def test_year_and_month(cases):
    assert [c.id for c in filter_cases(cases, year=2025)] == ["P1", "P2", "P3"]
    assert [c.id for c in filter_cases(cases, year=2025, month=0)] == ["P1", "P2"]
    assert [c.id for c in filter_cases(cases, month=11)] == ["P4"]


def test_predicate_narrows_after_partition_filter(cases):
    predicate = CasePredicate("patient_gender", Gender.MALE)
    assert [c.id for c in filter_cases(cases, year=2025, predicate=predicate)] == ["P1"]


def test_predicate_accepts_plain_enum_value(cases):
    predicate = CasePredicate("specialty", "Urology")
    assert [c.id for c in filter_cases(cases, predicate=predicate)] == ["P3"]


def test_unknown_field_is_rejected():
    with pytest.raises(ValueError):
        CasePredicate("favourite_colour", "blue")


def test_filter_preserves_order_and_input(cases):
    snapshot = list(cases)
    filter_cases(cases, year=2024)
    assert cases == snapshot


# ---- Catalog ----
def test_available_years_descending(partitions):
    assert available_years(partitions) == [2025, 2024]


def test_available_months(partitions):
    assert available_months(partitions, 2025) == [0, 1]
    assert available_months(partitions, 2024) == [11]
    assert available_months(partitions, ALL) == [0, 1, 11]


def test_reconcile_keeps_valid_selection(partitions):
    selection = Selection(2025, 1)
    assert reconcile_selection(partitions, selection) == selection


def test_reconcile_falls_back_to_latest_year(partitions):
    healed = reconcile_selection(partitions, Selection(2019, 0))
    assert (healed.year, healed.month) == (2025, 0)


def test_reconcile_resets_unavailable_month(partitions):
    healed = reconcile_selection(partitions, Selection(2024, 0))
    assert (healed.year, healed.month) == (2024, ALL)


def test_reconcile_keeps_all_year(partitions):
    healed = reconcile_selection(partitions, Selection(ALL, 11))
    assert (healed.year, healed.month) == (ALL, 11)


def test_reconcile_empty_catalog_keeps_predicate():
    predicate = CasePredicate("patient_gender", Gender.MALE)
    healed = reconcile_selection([], Selection(2025, 3, predicate))
    assert healed == Selection(ALL, ALL, predicate)
