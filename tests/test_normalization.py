# tests/test_normalization.py
"""
Tests for row acceptance and the row-to-Case normalization rules.
"""

import pytest

from aps_ingest.constants import OPERATION_KEYWORDS
from aps_ingest.models import (
    AdverseEventType,
    DrugGroup,
    Gender,
    Nationality,
    OperationType,
    OrthoType,
    PatientType,
    PayerType,
    PostOpPainMgmt,
    Specialty,
    TraumaType,
)
from aps_ingest.normalization import (
    CaseNormalizer,
    accepts_row,
    pain_reduction_achieved,
    scan_keywords,
)
from aps_ingest.partitions import resolve_partition
from aps_ingest.rows import RawRow


# ---- Test Fixtures ----
@pytest.fixture
def normalizer():
    """
    A default CaseNormalizer.
    """
    return CaseNormalizer()


@pytest.fixture
def january():
    """
    The resolved "Jan 2025" partition.
    """
    return resolve_partition("Jan 2025")


def normalize(normalizer, partition, mapping):
    return normalizer.normalize(RawRow.from_mapping(mapping), partition)


# ---- Row Acceptance ----
@pytest.mark.parametrize(
    "mapping",
    [
        {"E": 45},
        {"A": "  ", "E": 45},
        {"A": "ID", "E": 45},
        {"A": " HN ", "E": 45},
        {"A": "P001"},
        {"A": "P001", "E": "n/a"},
    ],
)
def test_rejected_rows(mapping):
    assert not accepts_row(RawRow.from_mapping(mapping))


def test_accepted_row_with_numeric_text_age():
    assert accepts_row(RawRow.from_mapping({"A": "P001", "E": "45"}))


# ---- Worked Example ----
def test_worked_example(normalizer, january, example_row):
    """
    Jan 2025 row with baseline 8 and first window 6 misses the 50% reduction.
    """
    case = normalize(normalizer, january, example_row)

    assert case is not None
    assert case.id == "P001"
    assert case.patient_age == 45
    assert case.patient_gender is Gender.FEMALE
    assert case.pain_scores.rest_24h == 6
    assert case.pain_scores.rest_48h == 4
    assert case.pain_scores.rest_72h is None
    assert case.pain_reduction_50_percent is False
    assert case.complications is False
    assert case.adverse_events == ()
    assert case.satisfaction_score == 5
    assert case.proms_improvement == 0
    assert (case.month, case.year) == (0, 2025)
    assert case.partition_label == "Jan 2025"


def test_defaults_for_absent_fields(normalizer, january):
    case = normalize(normalizer, january, {"A": "P010", "E": 30})

    assert case.patient_type is PatientType.NEW
    assert case.payer is PayerType.LOCAL_SELFPAY
    assert case.nationality is Nationality.NON_THAI
    assert case.trauma_type is TraumaType.OTHER
    assert case.post_op_pain_mgmt is PostOpPainMgmt.IV_PCA
    assert case.specialty is Specialty.ORTHO
    assert case.operation_type is OperationType.NON_ELECTIVE
    assert case.ortho_type is OrthoType.NON_TRAUMA
    assert case.drug_groups == ()
    assert case.drug_group_category == "Unknown"
    assert case.patient_feedback is None
    assert case.pain_score_discharge is None


def test_identity_is_stringified(normalizer, january):
    case = normalize(normalizer, january, {"A": 1001.0, "E": 30})
    assert case.id == "1001"


# ---- Field Rules ----
@pytest.mark.parametrize(
    "raw, expected",
    [("M", Gender.MALE), ("male", Gender.MALE), ("F", Gender.FEMALE), ("X", Gender.FEMALE), (None, Gender.FEMALE)],
)
def test_gender_is_binary(normalizer, january, raw, expected):
    case = normalize(normalizer, january, {"A": "P1", "E": 40, "H": raw})
    assert case.patient_gender is expected


def test_nationality_substring_rule(normalizer, january):
    thai = normalize(normalizer, january, {"A": "P1", "E": 40, "I": "thai"})
    other = normalize(normalizer, january, {"A": "P2", "E": 40, "I": "Myanmar"})
    assert thai.nationality is Nationality.THAI
    assert other.nationality is Nationality.NON_THAI


def test_patient_type_existing(normalizer, january):
    case = normalize(normalizer, january, {"A": "P1", "E": 40, "F": "existing patient"})
    assert case.patient_type is PatientType.EXISTING


def test_enumerated_columns_match_exact_values(normalizer, january):
    case = normalize(
        normalizer,
        january,
        {"A": "P1", "E": 40, "G": "Inter Insurance", "J": "Epidural", "M": "Urology", "O": "Fall"},
    )
    assert case.payer is PayerType.INTER_INSURANCE
    assert case.post_op_pain_mgmt is PostOpPainMgmt.EPIDURAL
    assert case.specialty is Specialty.UROLOGY
    assert case.trauma_type is TraumaType.FALL


def test_keyword_scan_last_match_wins():
    cells = ["Elective", "something", "Non operation"]
    assert scan_keywords(cells, OPERATION_KEYWORDS, "fallback") == "Non operation"


def test_keyword_scan_prefers_longer_keyword_within_a_cell():
    assert scan_keywords(["NON ELECTIVE case"], OPERATION_KEYWORDS, "fallback") == "Non Elective OR"
    assert scan_keywords(["nothing"], OPERATION_KEYWORDS, "fallback") == "fallback"


def test_operation_and_ortho_from_any_cell(normalizer, january):
    case = normalize(normalizer, january, {"A": "P1", "E": 40, "N": "elective", "P": "Trauma"})
    assert case.operation_type is OperationType.ELECTIVE
    assert case.ortho_type is OrthoType.TRAUMA


@pytest.mark.parametrize(
    "baseline, first, expected",
    [(8, 4, True), (8, 4.1, False), (8, 6, False), (0, 0, False), (None, 2, False), (8, None, False)],
)
def test_pain_reduction_achieved(baseline, first, expected):
    assert pain_reduction_achieved(baseline, first) is expected


def test_adverse_events_in_column_order(normalizer, january):
    case = normalize(
        normalizer,
        january,
        {"A": "P1", "E": 40, "AU": "Y", "AO": 1, "AQ": "N", "AT": "1"},
    )
    assert case.adverse_events == (
        AdverseEventType.NAUSEA_VOMITING,
        AdverseEventType.HYPOTENSION,
        AdverseEventType.RESPIRATORY_DEPRESSION,
    )
    assert case.complications is True


def test_drug_groups_keep_known_members_only(normalizer, january):
    case = normalize(normalizer, january, {"A": "P1", "E": 40, "AE": "OPIOIDS, Herbal, ADJUVANTS"})
    assert case.drug_groups == (DrugGroup.OPIOIDS, DrugGroup.ADJUVANTS)
    assert case.drug_group_category == "OPIOIDS, Herbal, ADJUVANTS"


def test_medication_lists(normalizer, january):
    case = normalize(normalizer, january, {"A": "P1", "E": 40, "AB": "Morphine, Fentanyl", "AC": "Paracetamol"})
    assert case.opioids == ("Morphine", "Fentanyl")
    assert case.non_opioids == ("Paracetamol",)
    assert case.adjuvants == ()


def test_satisfaction_zero_is_kept(normalizer, january):
    case = normalize(normalizer, january, {"A": "P1", "E": 40, "AW": 0, "AX": 35})
    assert case.satisfaction_score == 0
    assert case.proms_improvement == 35


def test_quality_indicators(normalizer, january):
    case = normalize(normalizer, january, {"A": "P1", "E": 40, "V": 3, "AA": 1, "Z": 4, "AF": 0})
    indicators = case.quality_indicators
    assert indicators.freq_rest_24h == 3
    assert indicators.freq_rest_72h == 1
    assert indicators.freq_movement_24h == 4
    assert indicators.freq_movement_72h == 0


def test_normalization_is_idempotent(normalizer, january, example_row):
    row = RawRow.from_mapping(example_row)
    assert normalizer.normalize(row, january) == normalizer.normalize(row, january)


def test_normalize_rows_drops_rejected_rows(normalizer, january):
    rows = [RawRow.from_mapping(item) for item in ({"A": "ID"}, {"A": "P1", "E": 40}, {"A": "P2"})]
    cases = normalizer.normalize_rows(rows, january)
    assert [case.id for case in cases] == ["P1"]
