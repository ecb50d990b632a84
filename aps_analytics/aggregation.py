from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from aps_ingest.models import (
    SEVERE_ADVERSE_EVENTS,
    Case,
    PainInterference,
    QualityIndicators,
)
from aps_ingest.partitions import month_label

from .constants import (
    AGE_BANDS,
    MEDICATION_RANKING_LIMIT,
    OLDEST_AGE_BAND,
    OTHER_LABEL,
    PAIN_KINDS,
    PAIN_PERIODS,
    RATE_COLUMN,
    SEVERE_PAIN_THRESHOLD,
    SUCCESS_RATE_COLUMN,
    TARGET_COLUMN,
    TOP_CATEGORY_LIMIT,
    UNKNOWN_LABEL,
)
from .filtering import case_field_value


NumericAccessor = Callable[[Case], Optional[float]]
CasePredicateFn = Callable[[Case], bool]

MEDICATION_FIELDS = ("opioids", "non_opioids", "adjuvants")
QUALITY_INDICATOR_FIELDS = tuple(item.name for item in fields(QualityIndicators))
INTERFERENCE_FIELDS = tuple(item.name for item in fields(PainInterference))
BREAKDOWN_COLUMNS = ["name", "value", "percentage"]


@dataclass(frozen=True, slots=True)
class AverageStats:
    """Mean over non-null values together with the sum and count behind it."""

    average: float
    total: float
    count: int

    @property
    def has_data(self) -> bool:
        return self.count > 0


@dataclass(frozen=True, slots=True)
class RateStats:
    rate: float
    numerator: int
    denominator: int


@dataclass(frozen=True, slots=True)
class SummaryKpis:
    total_cases: int
    avg_rest_pain_24h: AverageStats
    complication_rate: RateStats
    pain_reduction_rate: RateStats

    def as_dict(self) -> Dict[str, object]:
        return {
            "Total Cases": self.total_cases,
            "Avg Pain (Rest 24h)": round_half_up(self.avg_rest_pain_24h.average, 2),
            "Avg Pain (Rest 24h) n": self.avg_rest_pain_24h.count,
            "Complication Rate (%)": self.complication_rate.rate,
            "Pain Reduction >50% (%)": self.pain_reduction_rate.rate,
        }


# --- reductions ---
def round_half_up(value: float, digits: int) -> float:
    """Round with ties away from zero, the way dashboard figures are printed."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def null_tolerant_average(cases: Iterable[Case], accessor: NumericAccessor) -> AverageStats:
    values = [value for value in map(accessor, cases) if value is not None]
    total = float(sum(values))
    count = len(values)
    return AverageStats(total / count if count else 0.0, total, count)


def compute_rate(cases: Sequence[Case], predicate: CasePredicateFn) -> RateStats:
    denominator = len(cases)
    numerator = sum(1 for case in cases if predicate(case))
    if not denominator:
        return RateStats(0.0, 0, 0)
    return RateStats(round_half_up(numerator / denominator * 100, 1), numerator, denominator)


def group_by_month(cases: Iterable[Case]) -> List[Tuple[int, List[Case]]]:
    """Bucket cases by month, ascending; months without cases are absent."""
    buckets: Dict[int, List[Case]] = {}
    for case in cases:
        buckets.setdefault(case.month, []).append(case)
    return [(month, buckets[month]) for month in sorted(buckets)]


# --- categorical counting ---
def category_label(value: object) -> str:
    if isinstance(value, Enum):
        value = value.value
    if value is None or str(value) == "":
        return UNKNOWN_LABEL
    return str(value)


def ranked_counts(labels: Iterable[str]) -> List[Tuple[str, int]]:
    """Count labels, most frequent first; ties keep first-seen order."""
    return sorted(Counter(labels).items(), key=lambda item: item[1], reverse=True)


def bucket_top_n(
    ranked: Sequence[Tuple[str, int]],
    limit: int = TOP_CATEGORY_LIMIT,
) -> List[Tuple[str, int]]:
    """Keep the ``limit`` largest entries and fold the remainder into "Other".

    Folding only happens when there are more than ``limit + 1`` entries, so a
    lone overflow category is shown under its own name. When folding, the
    result is always ``limit`` named entries plus one "Other"; a genuine
    "Other" category is never one of the named entries and joins the overflow.
    """
    if len(ranked) <= limit + 1:
        return list(ranked)
    named = [entry for entry in ranked if entry[0] != OTHER_LABEL]
    kept = named[:limit]
    overflow = sum(count for _, count in ranked) - sum(count for _, count in kept)
    kept.append((OTHER_LABEL, overflow))
    return kept


def _breakdown_frame(entries: Sequence[Tuple[str, int]]) -> pd.DataFrame:
    total = sum(count for _, count in entries)
    rows = [
        {
            "name": label,
            "value": count,
            "percentage": round_half_up(count / total * 100, 1) if total else 0.0,
        }
        for label, count in entries
    ]
    return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)


def category_breakdown(
    cases: Iterable[Case],
    field: str,
    limit: int = TOP_CATEGORY_LIMIT,
) -> pd.DataFrame:
    ranked = ranked_counts(category_label(case_field_value(case, field)) for case in cases)
    return _breakdown_frame(bucket_top_n(ranked, limit))


def _member_values(case: Case, field: str) -> Tuple[object, ...]:
    value = case_field_value(case, field)
    return value if isinstance(value, tuple) else (value,)


def enum_breakdown(cases: Iterable[Case], field: str, members: Iterable[Enum]) -> pd.DataFrame:
    """Counts for every member of a closed enumeration, zeros included.

    List-valued fields contribute one count per element.
    """
    counts: Dict[object, int] = {member: 0 for member in members}
    for case in cases:
        for value in _member_values(case, field):
            if value in counts:
                counts[value] += 1
    return _breakdown_frame([(category_label(member), count) for member, count in counts.items()])


def age_group_label(age: float) -> str:
    for upper, label in AGE_BANDS:
        if age < upper:
            return label
    return OLDEST_AGE_BAND


def age_group_breakdown(cases: Iterable[Case]) -> pd.DataFrame:
    counts = Counter(age_group_label(case.patient_age) for case in cases)
    order = [label for _, label in AGE_BANDS] + [OLDEST_AGE_BAND]
    return _breakdown_frame([(label, counts[label]) for label in order if counts[label]])


def adverse_event_distribution(cases: Iterable[Case], severity: str) -> pd.DataFrame:
    if severity not in {"general", "severe"}:
        raise ValueError(f"Unknown adverse event severity: {severity!r}")
    want_severe = severity == "severe"
    labels = (
        event.value
        for case in cases
        for event in case.adverse_events
        if (event in SEVERE_ADVERSE_EVENTS) == want_severe
    )
    return pd.DataFrame(ranked_counts(labels), columns=["name", "value"])


def medication_frequency(
    cases: Iterable[Case],
    field: str,
    limit: int = MEDICATION_RANKING_LIMIT,
) -> pd.DataFrame:
    """Rank free-text medication tokens; shares are of all tokens, not of cases."""
    if field not in MEDICATION_FIELDS:
        raise ValueError(f"Not a medication list field: {field!r}")
    tokens = [
        token.strip()
        for case in cases
        for token in getattr(case, field)
        if token.strip()
    ]
    total = len(tokens)
    rows = [
        {"name": name, "value": count, "percent": round_half_up(count / total * 100, 1)}
        for name, count in ranked_counts(tokens)[:limit]
    ]
    return pd.DataFrame(rows, columns=["name", "value", "percent"])


def pain_interference_profile(cases: Sequence[Case]) -> pd.DataFrame:
    count = len(cases) or 1
    rows = []
    for name in INTERFERENCE_FIELDS:
        total = sum(getattr(case.pain_interference, name) for case in cases)
        rows.append(
            {
                "subject": name.replace("_", " ").title(),
                "Avg Score": round_half_up(total / count, 2),
                "Full Mark": 10,
            }
        )
    return pd.DataFrame(rows, columns=["subject", "Avg Score", "Full Mark"])


# --- monthly series ---
def _average_columns(label: str, stats: AverageStats) -> Dict[str, object]:
    return {
        label: round_half_up(stats.average, 2),
        f"{label}_num": stats.total,
        f"{label}_den": stats.count,
    }


def monthly_pain_trend(cases: Iterable[Case], kind: str) -> pd.DataFrame:
    if kind not in PAIN_KINDS:
        raise ValueError(f"Unknown pain score kind: {kind!r}")
    columns = ["name"]
    for period in PAIN_PERIODS:
        columns.extend([period, f"{period}_num", f"{period}_den"])
    rows = []
    for month, items in group_by_month(cases):
        row: Dict[str, object] = {"name": month_label(month)}
        for period in PAIN_PERIODS:
            stats = null_tolerant_average(
                items, lambda case, period=period: case.pain_scores.window(kind, period)
            )
            row.update(_average_columns(period, stats))
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def monthly_average_series(
    cases: Iterable[Case],
    accessor: NumericAccessor,
    label: str,
) -> pd.DataFrame:
    rows = []
    for month, items in group_by_month(cases):
        row: Dict[str, object] = {"name": month_label(month)}
        row.update(_average_columns(label, null_tolerant_average(items, accessor)))
        rows.append(row)
    return pd.DataFrame(rows, columns=["name", label, f"{label}_num", f"{label}_den"])


def monthly_rate_series(
    cases: Iterable[Case],
    predicate: CasePredicateFn,
    label: str = SUCCESS_RATE_COLUMN,
) -> pd.DataFrame:
    rows = []
    for month, items in group_by_month(cases):
        stats = compute_rate(items, predicate)
        rows.append(
            {
                "name": month_label(month),
                label: stats.rate,
                "numerator": stats.numerator,
                "denominator": stats.denominator,
            }
        )
    return pd.DataFrame(rows, columns=["name", label, "numerator", "denominator"])


def severe_pain_series(
    cases: Iterable[Case],
    indicator: str,
    target: Optional[float] = None,
) -> pd.DataFrame:
    """Monthly share of cases whose quality indicator reached the severe threshold.

    ``target`` only annotates the output; it never changes the computed rate.
    """
    if indicator not in QUALITY_INDICATOR_FIELDS:
        raise ValueError(f"Unknown quality indicator: {indicator!r}")

    def is_severe(case: Case) -> bool:
        value = getattr(case.quality_indicators, indicator)
        return value is not None and value >= SEVERE_PAIN_THRESHOLD

    frame = monthly_rate_series(cases, is_severe, RATE_COLUMN)
    if target is not None:
        frame[TARGET_COLUMN] = float(target)
        frame["Within Target"] = frame[RATE_COLUMN] <= target
    return frame


def monthly_category_trend(
    cases: Sequence[Case],
    field: str,
    limit: int = TOP_CATEGORY_LIMIT,
) -> pd.DataFrame:
    """Stacked monthly counts of a categorical field.

    The series keys are chosen once over the whole collection and reused for
    every month, so "Other" absorbs the same categories everywhere.
    """
    labels = [category_label(case_field_value(case, field)) for case in cases]
    ranked = ranked_counts(labels)
    keys = [label for label, _ in bucket_top_n(ranked, limit)]
    kept = set(keys)

    rows = []
    for month, items in group_by_month(cases):
        row: Dict[str, object] = {"name": month_label(month)}
        row.update({key: 0 for key in keys})
        for case in items:
            label = category_label(case_field_value(case, field))
            if label not in kept:
                label = OTHER_LABEL
            row[label] += 1
        rows.append(row)
    return pd.DataFrame(rows, columns=["name", *keys])


def monthly_enum_counts(cases: Iterable[Case], field: str, members: Iterable[Enum]) -> pd.DataFrame:
    """Monthly counts for each member of a closed enumeration, zeros included."""
    labels = [category_label(member) for member in members]
    rows = []
    for month, items in group_by_month(cases):
        counts = {label: 0 for label in labels}
        for case in items:
            for value in _member_values(case, field):
                label = category_label(value)
                if label in counts:
                    counts[label] += 1
        rows.append({"name": month_label(month), **counts})
    return pd.DataFrame(rows, columns=["name", *labels])


def summary_kpis(cases: Sequence[Case]) -> SummaryKpis:
    return SummaryKpis(
        total_cases=len(cases),
        avg_rest_pain_24h=null_tolerant_average(cases, lambda case: case.pain_scores.rest_24h),
        complication_rate=compute_rate(cases, lambda case: case.complications),
        pain_reduction_rate=compute_rate(cases, lambda case: case.pain_reduction_50_percent),
    )
