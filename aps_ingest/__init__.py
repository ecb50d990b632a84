"""APS workbook ingestion and case normalization package."""

from .exceptions import IngestError, NoValidDataError, WorkbookReadError
from .models import Case, Dataset, Partition
from .normalization import CaseNormalizer, accepts_row
from .partitions import ResolvedPartition, resolve_partition
from .rows import RawRow
from .workbook import load_sheets, load_workbook, read_workbook

__all__ = [
    "Case",
    "CaseNormalizer",
    "Dataset",
    "IngestError",
    "NoValidDataError",
    "Partition",
    "RawRow",
    "ResolvedPartition",
    "WorkbookReadError",
    "accepts_row",
    "load_sheets",
    "load_workbook",
    "read_workbook",
    "resolve_partition",
]
