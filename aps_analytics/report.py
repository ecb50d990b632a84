"""Assemble the dashboard sections for one dataset and selection."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import pandas as pd

from aps_ingest.models import Case, Dataset, DrugGroup, Gender, OperationType, OrthoType

from .aggregation import (
    SummaryKpis,
    adverse_event_distribution,
    category_label,
    age_group_breakdown,
    category_breakdown,
    enum_breakdown,
    medication_frequency,
    monthly_average_series,
    monthly_category_trend,
    monthly_enum_counts,
    monthly_pain_trend,
    monthly_rate_series,
    pain_interference_profile,
    severe_pain_series,
    summary_kpis,
)
from .constants import (
    ALL,
    DEFAULT_SEVERE_PAIN_TARGETS,
    MEDICATION_RANKING_LIMIT,
    SEVERE_PAIN_TITLES,
    TOP_CATEGORY_LIMIT,
)
from .filtering import Selection, apply_selection
from .utils import cases_to_frame


@dataclass(slots=True)
class ReportConfig:
    severe_pain_targets: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_SEVERE_PAIN_TARGETS)
    )
    medication_limit: int = MEDICATION_RANKING_LIMIT
    category_limit: int = TOP_CATEGORY_LIMIT


@dataclass(slots=True)
class AnalyticsReport:
    selection: Selection
    kpis: SummaryKpis
    sections: Dict[str, Dict[str, pd.DataFrame]] = field(default_factory=dict)

    def frame(self, section: str, title: str) -> pd.DataFrame:
        return self.sections[section][title]

    def selection_dict(self) -> Dict[str, object]:
        predicate = self.selection.predicate
        return {
            "Year": self.selection.year,
            "Month": self.selection.month,
            "Filter": f"{predicate.field} = {category_label(predicate.value)}" if predicate else "",
        }


def build_report(
    dataset: Dataset,
    selection: Selection,
    config: ReportConfig | None = None,
) -> AnalyticsReport:
    """Compute every section of the report.

    Distribution charts use the month-scoped cases, trend charts the
    year-scoped cases; both honour the active predicate.
    """
    config = config or ReportConfig()
    period_cases = apply_selection(dataset.cases, selection)
    year_cases = apply_selection(
        dataset.cases, Selection(selection.year, ALL, selection.predicate)
    )
    limit = config.category_limit

    sections: Dict[str, Dict[str, pd.DataFrame]] = {
        "Overview": {
            "Operation Type Distribution": enum_breakdown(period_cases, "operation_type", OperationType),
            "Ortho Type Distribution": enum_breakdown(period_cases, "ortho_type", OrthoType),
            "Pain Trends (Rest)": monthly_pain_trend(year_cases, "rest"),
            "Pain Trends (On Movement)": monthly_pain_trend(year_cases, "movement"),
            "Pain Reduction Effectiveness": monthly_rate_series(
                year_cases, lambda case: case.pain_reduction_50_percent
            ),
        },
        "Patient Profile": {
            "Patient Type Distribution": category_breakdown(period_cases, "patient_type", limit),
            "Gender Distribution": enum_breakdown(period_cases, "patient_gender", Gender),
            "Gender Trends": monthly_category_trend(year_cases, "patient_gender", limit),
            "Patient Age Groups": age_group_breakdown(period_cases),
            "Nationality Breakdown": category_breakdown(period_cases, "nationality", limit),
            "Nationality Trends": monthly_category_trend(year_cases, "nationality", limit),
            "Payer Type Distribution": category_breakdown(period_cases, "payer", limit),
            "Payer Trends": monthly_category_trend(year_cases, "payer", limit),
            "Specialty Distribution": category_breakdown(period_cases, "specialty", limit),
            "Specialty Trends": monthly_category_trend(year_cases, "specialty", limit),
            "Trauma Type Distribution": category_breakdown(period_cases, "trauma_type", limit),
            "Trauma Type Trends": monthly_category_trend(year_cases, "trauma_type", limit),
        },
        "Pain Management": {
            "Post-Op Pain Management Methods": category_breakdown(
                period_cases, "post_op_pain_mgmt", limit
            ),
            "Post-Op Management Trends": monthly_category_trend(
                year_cases, "post_op_pain_mgmt", limit
            ),
            "Opioids": medication_frequency(period_cases, "opioids", config.medication_limit),
            "Non-Opioids": medication_frequency(period_cases, "non_opioids", config.medication_limit),
            "Adjuvants": medication_frequency(period_cases, "adjuvants", config.medication_limit),
        },
        "Pain Assessment": _pain_assessment(year_cases),
        "Medication": {
            "Drug Group Utilization": monthly_enum_counts(year_cases, "drug_groups", DrugGroup),
            "Drug Group Summary": enum_breakdown(period_cases, "drug_groups", DrugGroup),
            "Drug Group Category": category_breakdown(period_cases, "drug_group_category", limit),
        },
        "Effectiveness": {
            SEVERE_PAIN_TITLES.get(indicator, indicator): severe_pain_series(
                year_cases, indicator, target
            )
            for indicator, target in config.severe_pain_targets.items()
        },
        "Safety": {
            "General Side Effects": adverse_event_distribution(period_cases, "general"),
            "Severe Complications": adverse_event_distribution(period_cases, "severe"),
            "Complication Trends": monthly_rate_series(
                year_cases, lambda case: case.complications, "Complication Rate (%)"
            ),
        },
        "Experience": {
            "Satisfaction Trends": monthly_average_series(
                year_cases, lambda case: case.satisfaction_score, "Satisfaction Score"
            ),
            "PROMs Trends": monthly_average_series(
                year_cases, lambda case: case.proms_improvement, "PROMs Improvement (%)"
            ),
            "Pain Interference with ADL": pain_interference_profile(period_cases),
        },
        "Detailed Records": {"Detailed Case Records": cases_to_frame(period_cases)},
    }
    return AnalyticsReport(selection, summary_kpis(period_cases), sections)


def _pain_assessment(cases: Sequence[Case]) -> Dict[str, pd.DataFrame]:
    frames: Dict[str, pd.DataFrame] = {}
    for kind, title in (("rest", "Rest"), ("movement", "Movement")):
        for operation in OperationType:
            subset: List[Case] = [case for case in cases if case.operation_type == operation]
            frames[f"Pain Trends ({title}) - {operation.value}"] = monthly_pain_trend(subset, kind)
    frames["Pain at Discharge (Trend)"] = monthly_average_series(
        cases, lambda case: case.pain_score_discharge, "Discharge Pain"
    )
    return frames
