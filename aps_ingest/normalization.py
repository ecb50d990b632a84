from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .constants import (
    DEFAULT_PROMS_IMPROVEMENT,
    DEFAULT_SATISFACTION_SCORE,
    HEADER_SENTINELS,
    OPERATION_KEYWORDS,
    ORTHO_KEYWORDS,
    UNKNOWN_DRUG_GROUP,
)
from .models import (
    AdverseEventType,
    Case,
    DrugGroup,
    Gender,
    Nationality,
    OperationType,
    OrthoType,
    PainInterference,
    PainScores,
    PatientType,
    PayerType,
    PostOpPainMgmt,
    QualityIndicators,
    Specialty,
    TraumaType,
)
from .parsing import (
    cell_text,
    is_blank,
    lookup_enum,
    parse_delimited_list,
    parse_flag,
    parse_nullable_number,
)
from .partitions import ResolvedPartition
from .rows import RawRow


logger = logging.getLogger(__name__)

# Adverse event columns in the order events are appended.
ADVERSE_EVENT_FIELDS: Tuple[Tuple[str, AdverseEventType], ...] = (
    ("ae_nausea_vomiting", AdverseEventType.NAUSEA_VOMITING),
    ("ae_sedation", AdverseEventType.SEDATION),
    ("ae_pruritus", AdverseEventType.PRURITUS),
    ("ae_urinary_retention", AdverseEventType.URINARY_RETENTION),
    ("ae_dizziness", AdverseEventType.DIZZINESS),
    ("ae_hypotension", AdverseEventType.HYPOTENSION),
    ("ae_respiratory_depression", AdverseEventType.RESPIRATORY_DEPRESSION),
)


def accepts_row(row: RawRow) -> bool:
    """Row-acceptance predicate: a real identity and a numeric age."""
    if is_blank(row.case_id):
        return False
    if cell_text(row.case_id).strip() in HEADER_SENTINELS:
        return False
    return parse_nullable_number(row.age) is not None


def scan_keywords(
    cells: Iterable[object],
    keywords: Sequence[Tuple[str, str]],
    default: str,
) -> str:
    """Return the label of the last cell matching any keyword.

    Within a single cell the keywords are tried in order, so ``NON TRAUMA``
    wins over its ``TRAUMA`` substring.
    """
    found = default
    for cell in cells:
        text = cell_text(cell).upper()
        for keyword, label in keywords:
            if keyword in text:
                found = label
                break
    return found


def pain_reduction_achieved(baseline: Optional[float], first_window: Optional[float]) -> bool:
    if baseline is None or first_window is None or baseline <= 0:
        return False
    return first_window <= baseline * 0.5


class CaseNormalizer:
    """Map raw spreadsheet rows onto immutable :class:`Case` records."""

    def normalize(self, row: RawRow, partition: ResolvedPartition) -> Optional[Case]:
        if not accepts_row(row):
            return None

        pain_scores = PainScores(
            rest_24h=parse_nullable_number(row.rest_24h),
            rest_48h=parse_nullable_number(row.rest_48h),
            rest_72h=parse_nullable_number(row.rest_72h),
            movement_24h=parse_nullable_number(row.movement_24h),
            movement_48h=parse_nullable_number(row.movement_48h),
            movement_72h=parse_nullable_number(row.movement_72h),
        )
        adverse_events = self._adverse_events(row)
        baseline = parse_nullable_number(row.rest_baseline)

        return Case(
            id=cell_text(row.case_id),
            date=partition.anchor_date,
            patient_age=parse_nullable_number(row.age) or 0.0,
            patient_gender=self._gender(row.gender),
            patient_type=(
                PatientType.EXISTING
                if "EXISTING" in cell_text(row.patient_type).upper()
                else PatientType.NEW
            ),
            payer=lookup_enum(row.payer, PayerType, PayerType.LOCAL_SELFPAY),
            nationality=(
                Nationality.THAI
                if "THAI" in cell_text(row.nationality).upper()
                else Nationality.NON_THAI
            ),
            trauma_type=lookup_enum(row.trauma_type, TraumaType, TraumaType.OTHER),
            post_op_pain_mgmt=lookup_enum(
                row.post_op_pain_mgmt, PostOpPainMgmt, PostOpPainMgmt.IV_PCA
            ),
            specialty=lookup_enum(row.specialty, Specialty, Specialty.ORTHO),
            operation_type=OperationType(
                scan_keywords(row.cells, OPERATION_KEYWORDS, OperationType.NON_ELECTIVE.value)
            ),
            ortho_type=OrthoType(
                scan_keywords(row.cells, ORTHO_KEYWORDS, OrthoType.NON_TRAUMA.value)
            ),
            drug_groups=self._drug_groups(row.drug_groups),
            drug_group_category=cell_text(row.drug_groups).strip() or UNKNOWN_DRUG_GROUP,
            opioids=tuple(parse_delimited_list(row.opioids)),
            non_opioids=tuple(parse_delimited_list(row.non_opioids)),
            adjuvants=tuple(parse_delimited_list(row.adjuvants)),
            pain_scores=pain_scores,
            pain_score_discharge=parse_nullable_number(row.pain_discharge),
            pain_reduction_50_percent=pain_reduction_achieved(baseline, pain_scores.rest_24h),
            complications=bool(adverse_events),
            adverse_events=adverse_events,
            quality_indicators=QualityIndicators(
                freq_rest_24h=parse_nullable_number(row.freq_rest_24h),
                freq_rest_72h=parse_nullable_number(row.freq_rest_72h),
                freq_movement_24h=parse_nullable_number(row.freq_movement_24h),
                freq_movement_72h=parse_nullable_number(row.freq_movement_72h),
            ),
            satisfaction_score=self._with_default(row.satisfaction, DEFAULT_SATISFACTION_SCORE),
            proms_improvement=self._with_default(row.proms, DEFAULT_PROMS_IMPROVEMENT),
            pain_interference=PainInterference(),
            patient_feedback=cell_text(row.feedback) or None,
            partition_label=partition.label,
        )

    def normalize_rows(
        self,
        rows: Iterable[RawRow],
        partition: ResolvedPartition,
    ) -> List[Case]:
        cases: List[Case] = []
        rejected = 0
        for row in rows:
            case = self.normalize(row, partition)
            if case is None:
                rejected += 1
                continue
            cases.append(case)
        if rejected:
            logger.debug("Sheet %r: dropped %d row(s) failing acceptance", partition.label, rejected)
        return cases

    # --- helpers ---
    @staticmethod
    def _gender(cell: object) -> Gender:
        return Gender.MALE if cell_text(cell).upper().startswith("M") else Gender.FEMALE

    @staticmethod
    def _drug_groups(cell: object) -> Tuple[DrugGroup, ...]:
        members = {group.value: group for group in DrugGroup}
        return tuple(
            members[token] for token in parse_delimited_list(cell) if token in members
        )

    @staticmethod
    def _adverse_events(row: RawRow) -> Tuple[AdverseEventType, ...]:
        return tuple(
            event for field_name, event in ADVERSE_EVENT_FIELDS if parse_flag(getattr(row, field_name))
        )

    @staticmethod
    def _with_default(cell: object, default: float) -> float:
        value = parse_nullable_number(cell)
        return default if value is None else value
