from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional, Type, TypeVar

from .constants import FLAG_TRUE_TEXT


E = TypeVar("E", bound=Enum)


def is_blank(cell: object) -> bool:
    if cell is None:
        return True
    if isinstance(cell, float) and math.isnan(cell):
        return True
    return str(cell).strip() == ""


def cell_text(cell: object) -> str:
    """Render a cell the way the spreadsheet shows it (``1001.0`` -> ``"1001"``)."""
    if is_blank(cell):
        return ""
    if isinstance(cell, bool):
        return str(cell).upper()
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell)


def parse_nullable_number(cell: object) -> Optional[float]:
    if is_blank(cell):
        return None
    if isinstance(cell, bool):
        return float(cell)
    if isinstance(cell, (int, float)):
        return float(cell)
    try:
        value = float(str(cell).strip())
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def parse_delimited_list(cell: object) -> List[str]:
    if is_blank(cell):
        return []
    tokens = (token.strip() for token in cell_text(cell).split(","))
    return [token for token in tokens if token]


def parse_flag(cell: object) -> bool:
    # Text exports carry "1" as a string, which still counts as numeric 1.
    if cell == FLAG_TRUE_TEXT:
        return True
    return parse_nullable_number(cell) == 1.0


def lookup_enum(cell: object, enum_cls: Type[E], fallback: E) -> E:
    """Map a raw cell onto ``enum_cls`` by value, falling back when it is not a member."""
    text = cell_text(cell)
    for member in enum_cls:
        if member.value == text:
            return member
    return fallback
