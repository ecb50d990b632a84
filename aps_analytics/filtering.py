"""Scope a case collection by partition selection and one optional predicate."""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterable, List, Optional, Sequence, Union

from aps_ingest.models import Case, Partition

from .constants import ALL


YearSelector = Union[int, str]
MonthSelector = Union[int, str]

CASE_FIELDS = frozenset(item.name for item in fields(Case)) | {"month", "year"}


@dataclass(frozen=True, slots=True)
class CasePredicate:
    field: str
    value: object

    def __post_init__(self) -> None:
        if self.field not in CASE_FIELDS:
            raise ValueError(f"Unknown case field: {self.field!r}")

    def matches(self, case: Case) -> bool:
        return case_field_value(case, self.field) == self.value


@dataclass(frozen=True, slots=True)
class Selection:
    year: YearSelector = ALL
    month: MonthSelector = ALL
    predicate: Optional[CasePredicate] = None


def case_field_value(case: Case, field: str) -> object:
    if field not in CASE_FIELDS:
        raise ValueError(f"Unknown case field: {field!r}")
    return getattr(case, field)


def filter_cases(
    cases: Sequence[Case],
    year: YearSelector = ALL,
    month: MonthSelector = ALL,
    predicate: Optional[CasePredicate] = None,
) -> List[Case]:
    selected = [
        case
        for case in cases
        if (year == ALL or case.year == year) and (month == ALL or case.month == month)
    ]
    if predicate is not None:
        selected = [case for case in selected if predicate.matches(case)]
    return selected


def apply_selection(cases: Sequence[Case], selection: Selection) -> List[Case]:
    return filter_cases(cases, selection.year, selection.month, selection.predicate)


def available_years(partitions: Iterable[Partition]) -> List[int]:
    return sorted({partition.year for partition in partitions}, reverse=True)


def available_months(partitions: Iterable[Partition], year: YearSelector = ALL) -> List[int]:
    return sorted(
        {partition.month for partition in partitions if year == ALL or partition.year == year}
    )


def reconcile_selection(partitions: Sequence[Partition], selection: Selection) -> Selection:
    """Reset a year/month that the partition catalog no longer offers.

    An unavailable year falls back to the most recent year; an unavailable
    month falls back to ``ALL``. With an empty catalog both become ``ALL``.
    The predicate is carried over untouched.
    """
    if not partitions:
        return Selection(ALL, ALL, selection.predicate)
    years = available_years(partitions)
    year = selection.year
    if year != ALL and year not in years:
        year = years[0]
    month = selection.month
    if month != ALL and month not in available_months(partitions, year):
        month = ALL
    return Selection(year, month, selection.predicate)
