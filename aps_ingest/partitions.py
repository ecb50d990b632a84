"""Resolve monthly partitions from free-text sheet labels."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import MINYEAR, date
from typing import Optional

from .constants import CASE_DATE_DAY, MONTH_NAMES, MONTH_PATTERN, YEAR_PATTERN
from .models import Partition


@dataclass(frozen=True, slots=True)
class ResolvedPartition:
    label: str
    month: int
    year: int

    @property
    def anchor_date(self) -> date:
        """Synthetic case date used only for month/year bucketing."""
        return date(self.year, self.month + 1, CASE_DATE_DAY)

    def to_partition(self, case_count: int) -> Partition:
        return Partition(self.label, self.month, self.year, case_count)


def month_index(abbreviation: str) -> Optional[int]:
    lowered = abbreviation.lower()
    for idx, name in enumerate(MONTH_NAMES):
        if name.lower() == lowered:
            return idx
    return None


def month_label(month: int) -> str:
    return MONTH_NAMES[month]


def resolve_partition(label: str) -> Optional[ResolvedPartition]:
    text = label or ""
    month_match = MONTH_PATTERN.search(text)
    year_match = YEAR_PATTERN.search(text)
    if not month_match or not year_match:
        return None
    month = month_index(month_match.group(1))
    if month is None:
        return None
    year = int(year_match.group(0))
    if year < MINYEAR:
        return None
    return ResolvedPartition(label, month, year)
