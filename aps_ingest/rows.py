"""Typed view over a positionally keyed spreadsheet row."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

from .constants import COLUMN_KEYS, FREQ_MOVEMENT_24H_COLUMN


@dataclass(frozen=True, slots=True)
class RawRow:
    case_id: object = None
    age: object = None
    patient_type: object = None
    payer: object = None
    gender: object = None
    nationality: object = None
    post_op_pain_mgmt: object = None
    specialty: object = None
    trauma_type: object = None
    rest_baseline: object = None
    rest_24h: object = None
    movement_24h: object = None
    freq_rest_24h: object = None
    rest_48h: object = None
    movement_48h: object = None
    rest_72h: object = None
    movement_72h: object = None
    freq_rest_72h: object = None
    opioids: object = None
    non_opioids: object = None
    adjuvants: object = None
    drug_groups: object = None
    freq_movement_72h: object = None
    pain_discharge: object = None
    ae_nausea_vomiting: object = None
    ae_sedation: object = None
    ae_pruritus: object = None
    ae_urinary_retention: object = None
    ae_dizziness: object = None
    ae_hypotension: object = None
    ae_respiratory_depression: object = None
    satisfaction: object = None
    proms: object = None
    feedback: object = None
    freq_movement_24h: object = None
    # Every cell in column order, for keyword scans across the whole row.
    cells: Tuple[object, ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "RawRow":
        values: Dict[str, object] = {
            name: mapping.get(column) for name, column in COLUMN_KEYS.items()
        }
        values["freq_movement_24h"] = mapping.get(FREQ_MOVEMENT_24H_COLUMN)
        return cls(cells=tuple(mapping.values()), **values)
