"""Custom exceptions for the APS ingest package."""
from __future__ import annotations


class IngestError(RuntimeError):
    """Base error for workbook ingestion."""


class WorkbookReadError(IngestError):
    """Raised when the source workbook cannot be opened or parsed."""


class NoValidDataError(IngestError):
    """Raised when no sheet or row in a workbook yields a case."""
