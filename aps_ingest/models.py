"""Domain model for normalized acute pain service cases."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple


class OperationType(str, Enum):
    ELECTIVE = "Elective OR"
    NON_ELECTIVE = "Non Elective OR"
    NON_OPERATION = "Non operation"


class OrthoType(str, Enum):
    TRAUMA = "TRAUMA"
    NON_TRAUMA = "NON TRAUMA"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class PatientType(str, Enum):
    EXISTING = "EXISTING"
    NEW = "NEW"


class PayerType(str, Enum):
    LOCAL_INSURANCE = "Local Insurance"
    LOCAL_SELFPAY = "Local Selfpay"
    AMS_CONTRACT = "AMS Contract"
    INTER_INSURANCE = "Inter Insurance"


class TraumaType(str, Enum):
    TRAFFIC_ACCIDENT = "Traffic Accident"
    FALL = "Fall"
    SPORTS_INJURY = "Sports Injury"
    ASSAULT = "Assault"
    INDUSTRIAL = "Industrial"
    OTHER = "Other"


class PostOpPainMgmt(str, Enum):
    IV_PCA = "IV PCA"
    EPIDURAL = "Epidural"
    NERVE_BLOCK = "Nerve Block"
    ORAL = "Oral Meds"
    IV_BOLUS = "IV Bolus"


class Specialty(str, Enum):
    ORTHO = "Orthopedics"
    GEN_SURG = "General Surgery"
    NEURO = "Neurosurgery"
    UROLOGY = "Urology"
    OBGYN = "OBGYN"
    PLASTICS = "Plastics"


class Nationality(str, Enum):
    THAI = "THAI"
    NON_THAI = "NON-THAI"


class DrugGroup(str, Enum):
    OPIOIDS = "OPIOIDS"
    NON_OPIOIDS = "NON-OPIOIDS"
    ADJUVANTS = "ADJUVANTS"


class AdverseEventType(str, Enum):
    # General side effects
    NAUSEA_VOMITING = "Nausea/Vomiting"
    SEDATION = "Sedation"
    PRURITUS = "Pruritus"
    URINARY_RETENTION = "Urinary Retention"
    DIZZINESS = "Dizziness"

    # Severe / intervention complications
    HYPOTENSION = "Hypotension (Severe)"
    RESPIRATORY_DEPRESSION = "Resp. Depression"
    HEMATOMA = "Hematoma/Bleeding"
    NERVE_INJURY = "Nerve Injury"
    INFECTION = "Infection"
    DURAL_PUNCTURE = "Dural Puncture"
    MOTOR_BLOCK = "Prolonged Motor Block"
    CATHETER_MIGRATION = "Catheter Migration"
    LAST = "LAST (Toxicity)"
    ANAPHYLAXIS = "Anaphylaxis"


SEVERE_ADVERSE_EVENTS = frozenset(
    {
        AdverseEventType.HYPOTENSION,
        AdverseEventType.RESPIRATORY_DEPRESSION,
        AdverseEventType.HEMATOMA,
        AdverseEventType.NERVE_INJURY,
        AdverseEventType.ANAPHYLAXIS,
    }
)


@dataclass(frozen=True, slots=True)
class PainScores:
    rest_24h: Optional[float] = None
    rest_48h: Optional[float] = None
    rest_72h: Optional[float] = None
    movement_24h: Optional[float] = None
    movement_48h: Optional[float] = None
    movement_72h: Optional[float] = None

    def window(self, kind: str, period: str) -> Optional[float]:
        """Return the score for ``kind`` ("rest"/"movement") at ``period`` ("24h"/"48h"/"72h")."""
        return getattr(self, f"{kind}_{period}")


@dataclass(frozen=True, slots=True)
class QualityIndicators:
    """Counts of pain >= 4 observations per window."""

    freq_rest_24h: Optional[float] = None
    freq_rest_72h: Optional[float] = None
    freq_movement_24h: Optional[float] = None
    freq_movement_72h: Optional[float] = None


@dataclass(frozen=True, slots=True)
class PainInterference:
    general_activity: float = 0.0
    mood: float = 0.0
    walking_ability: float = 0.0
    normal_work: float = 0.0
    relations: float = 0.0
    sleep: float = 0.0
    enjoyment: float = 0.0


@dataclass(frozen=True, slots=True)
class Case:
    id: str
    date: date
    patient_age: float
    patient_gender: Gender
    patient_type: PatientType
    payer: PayerType
    nationality: Nationality
    trauma_type: TraumaType
    post_op_pain_mgmt: PostOpPainMgmt
    specialty: Specialty
    operation_type: OperationType
    ortho_type: OrthoType
    drug_groups: Tuple[DrugGroup, ...] = ()
    drug_group_category: str = "Unknown"
    opioids: Tuple[str, ...] = ()
    non_opioids: Tuple[str, ...] = ()
    adjuvants: Tuple[str, ...] = ()
    pain_scores: PainScores = field(default_factory=PainScores)
    pain_score_discharge: Optional[float] = None
    pain_reduction_50_percent: bool = False
    complications: bool = False
    adverse_events: Tuple[AdverseEventType, ...] = ()
    quality_indicators: QualityIndicators = field(default_factory=QualityIndicators)
    satisfaction_score: float = 5.0
    proms_improvement: float = 0.0
    pain_interference: PainInterference = field(default_factory=PainInterference)
    patient_feedback: Optional[str] = None
    partition_label: str = ""

    @property
    def month(self) -> int:
        """Zero-based month of the partition this case came from."""
        return self.date.month - 1

    @property
    def year(self) -> int:
        return self.date.year


@dataclass(frozen=True, slots=True)
class Partition:
    label: str
    month: int
    year: int
    case_count: int


@dataclass(frozen=True, slots=True)
class Dataset:
    cases: Tuple[Case, ...] = ()
    partitions: Tuple[Partition, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.cases
