from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from aps_ingest.models import Case, Dataset, Partition
from aps_ingest.workbook import load_sheets, load_workbook

from .constants import ALL
from .filtering import (
    CasePredicate,
    MonthSelector,
    Selection,
    YearSelector,
    apply_selection,
    available_months,
    available_years,
    reconcile_selection,
)
from .report import AnalyticsReport, ReportConfig, build_report


logger = logging.getLogger(__name__)


class AnalyticsSession:
    """The single-operator state around one loaded dataset.

    All derived views are recomputed from the dataset and the current
    selection on every call; nothing is cached.
    """

    def __init__(self, config: ReportConfig | None = None) -> None:
        self.config = config or ReportConfig()
        self.dataset = Dataset()
        self.selection = Selection()

    # --- loading ---
    def load_workbook(self, path: Path) -> Dataset:
        return self._replace_dataset(load_workbook(path))

    def load_sheets(self, sheets: Mapping[str, Sequence[Mapping[str, object]]]) -> Dataset:
        return self._replace_dataset(load_sheets(sheets))

    def _replace_dataset(self, dataset: Dataset) -> Dataset:
        # Only reached after a successful load; failures leave the old dataset.
        self.dataset = dataset
        latest = dataset.partitions[-1]
        self.selection = reconcile_selection(
            dataset.partitions, Selection(latest.year, latest.month, None)
        )
        logger.info(
            "Session dataset replaced: %d case(s), %d sheet(s); selected %s/%s",
            len(dataset.cases),
            len(dataset.partitions),
            self.selection.year,
            self.selection.month,
        )
        return dataset

    # --- selection ---
    @property
    def partitions(self) -> Sequence[Partition]:
        return self.dataset.partitions

    def available_years(self) -> List[int]:
        return available_years(self.partitions)

    def available_months(self) -> List[int]:
        return available_months(self.partitions, self.selection.year)

    def select_year(self, year: YearSelector) -> Selection:
        self.selection = reconcile_selection(
            self.partitions, Selection(year, self.selection.month, self.selection.predicate)
        )
        return self.selection

    def select_month(self, month: MonthSelector) -> Selection:
        """Select a month of the current year.

        An explicitly requested month that the catalog does not offer raises
        ``ValueError`` instead of silently resetting to ``ALL``; only year
        changes and reloads heal the month.
        """
        if month != ALL and month not in available_months(self.partitions, self.selection.year):
            raise ValueError(f"Month {month!r} is not available for year {self.selection.year!r}")
        self.selection = Selection(self.selection.year, month, self.selection.predicate)
        return self.selection

    def apply_predicate(self, field: str, value: object) -> Selection:
        """Narrow every view to ``field == value``, replacing any previous predicate."""
        self.selection = Selection(
            self.selection.year, self.selection.month, CasePredicate(field, value)
        )
        return self.selection

    def clear_predicate(self) -> Selection:
        self.selection = Selection(self.selection.year, self.selection.month, None)
        return self.selection

    # --- derived views ---
    def filtered_cases(self) -> List[Case]:
        return apply_selection(self.dataset.cases, self.selection)

    def year_cases(self) -> List[Case]:
        return apply_selection(
            self.dataset.cases, Selection(self.selection.year, ALL, self.selection.predicate)
        )

    def report(self) -> AnalyticsReport:
        return build_report(self.dataset, self.selection, self.config)

    @property
    def active_predicate(self) -> Optional[CasePredicate]:
        return self.selection.predicate
