"""Read APS workbooks and turn their monthly sheets into a normalized dataset."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from .exceptions import NoValidDataError, WorkbookReadError
from .models import Case, Dataset, Partition
from .normalization import CaseNormalizer
from .parsing import is_blank
from .partitions import resolve_partition
from .rows import RawRow


logger = logging.getLogger(__name__)

SheetRows = List[Dict[str, object]]

NO_VALID_DATA_MESSAGE = (
    "No valid data found. Ensure sheet names match (e.g., 'Jan 2025') and column A contains IDs."
)


def frame_to_rows(frame: pd.DataFrame) -> SheetRows:
    """Convert a headerless sheet into column-letter keyed rows.

    Empty cells are omitted and rows without any value are skipped, so each
    mapping only carries the cells that were actually filled in.
    """
    letters = [get_column_letter(position + 1) for position in range(frame.shape[1])]
    rows: SheetRows = []
    for values in frame.itertuples(index=False, name=None):
        row = {
            letter: value for letter, value in zip(letters, values) if not is_blank(value)
        }
        if row:
            rows.append(row)
    return rows


def read_workbook(path: Path) -> Dict[str, SheetRows]:
    if not path.exists():
        raise WorkbookReadError(f"Workbook not found: {path}")
    try:
        if path.suffix.lower() == ".csv":
            frames = {path.stem: pd.read_csv(path, header=None, dtype=object)}
        else:
            frames = pd.read_excel(path, sheet_name=None, header=None, dtype=object)
    except Exception as exc:
        raise WorkbookReadError(f"Unable to read workbook {path}: {exc}") from exc
    return {str(name): frame_to_rows(frame) for name, frame in frames.items()}


def load_sheets(
    sheets: Mapping[str, Sequence[Mapping[str, object]]],
    normalizer: CaseNormalizer | None = None,
) -> Dataset:
    """Normalize every resolvable sheet; the catalog is rebuilt from scratch."""
    normalizer = normalizer or CaseNormalizer()
    cases: List[Case] = []
    partitions: List[Partition] = []
    for label, rows in sheets.items():
        resolved = resolve_partition(label)
        if resolved is None:
            logger.debug("Skipping sheet %r: no month/year in label", label)
            continue
        sheet_cases = normalizer.normalize_rows(
            (RawRow.from_mapping(row) for row in rows), resolved
        )
        cases.extend(sheet_cases)
        partitions.append(resolved.to_partition(len(sheet_cases)))

    dataset = Dataset(tuple(cases), tuple(partitions))
    if dataset.is_empty:
        raise NoValidDataError(NO_VALID_DATA_MESSAGE)
    logger.info("Loaded %d case(s) from %d sheet(s)", len(cases), len(partitions))
    return dataset


def load_workbook(path: Path, normalizer: CaseNormalizer | None = None) -> Dataset:
    return load_sheets(read_workbook(path), normalizer)
