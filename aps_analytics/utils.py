from __future__ import annotations

from typing import Dict, Iterable, List

import pandas as pd

from aps_ingest.models import Case, Partition
from aps_ingest.partitions import month_label


CASE_COLUMNS = [
    "ID",
    "Date",
    "Sheet",
    "Age",
    "Gender",
    "Patient Type",
    "Nationality",
    "Payer",
    "Specialty",
    "Operation",
    "Ortho Type",
    "Trauma Type",
    "Pain Mgmt",
    "Drug Groups",
    "Opioids",
    "Non-Opioids",
    "Adjuvants",
    "Rest 24h",
    "Rest 48h",
    "Rest 72h",
    "Movement 24h",
    "Movement 48h",
    "Movement 72h",
    "Discharge",
    "Pain Reduction >50%",
    "Adverse Events",
    "Freq Rest 24h",
    "Freq Rest 72h",
    "Freq Movement 24h",
    "Freq Movement 72h",
    "Satisfaction",
    "PROMs Improvement (%)",
    "Feedback",
]

PARTITION_COLUMNS = ["Sheet", "Month", "Year", "Cases"]


def _joined(values: Iterable[object]) -> str:
    return ", ".join(getattr(value, "value", str(value)) for value in values)


def case_to_record(case: Case) -> Dict[str, object]:
    scores = case.pain_scores
    indicators = case.quality_indicators
    return {
        "ID": case.id,
        "Date": case.date.isoformat(),
        "Sheet": case.partition_label,
        "Age": case.patient_age,
        "Gender": case.patient_gender.value,
        "Patient Type": case.patient_type.value,
        "Nationality": case.nationality.value,
        "Payer": case.payer.value,
        "Specialty": case.specialty.value,
        "Operation": case.operation_type.value,
        "Ortho Type": case.ortho_type.value,
        "Trauma Type": case.trauma_type.value,
        "Pain Mgmt": case.post_op_pain_mgmt.value,
        "Drug Groups": _joined(case.drug_groups),
        "Opioids": _joined(case.opioids),
        "Non-Opioids": _joined(case.non_opioids),
        "Adjuvants": _joined(case.adjuvants),
        "Rest 24h": scores.rest_24h,
        "Rest 48h": scores.rest_48h,
        "Rest 72h": scores.rest_72h,
        "Movement 24h": scores.movement_24h,
        "Movement 48h": scores.movement_48h,
        "Movement 72h": scores.movement_72h,
        "Discharge": case.pain_score_discharge,
        "Pain Reduction >50%": case.pain_reduction_50_percent,
        "Adverse Events": _joined(case.adverse_events),
        "Freq Rest 24h": indicators.freq_rest_24h,
        "Freq Rest 72h": indicators.freq_rest_72h,
        "Freq Movement 24h": indicators.freq_movement_24h,
        "Freq Movement 72h": indicators.freq_movement_72h,
        "Satisfaction": case.satisfaction_score,
        "PROMs Improvement (%)": case.proms_improvement,
        "Feedback": case.patient_feedback or "",
    }


def cases_to_frame(cases: Iterable[Case]) -> pd.DataFrame:
    return pd.DataFrame([case_to_record(case) for case in cases], columns=CASE_COLUMNS)


def partitions_to_frame(partitions: Iterable[Partition]) -> pd.DataFrame:
    rows: List[Dict[str, object]] = [
        {
            "Sheet": partition.label,
            "Month": month_label(partition.month),
            "Year": partition.year,
            "Cases": partition.case_count,
        }
        for partition in partitions
    ]
    return pd.DataFrame(rows, columns=PARTITION_COLUMNS)
