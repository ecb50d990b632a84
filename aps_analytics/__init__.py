"""Filtering, aggregation and workbook reporting over normalized APS cases."""
from .aggregation import AverageStats, RateStats, SummaryKpis, summary_kpis
from .constants import ALL
from .excel import write_report_workbook
from .filtering import (
    CasePredicate,
    Selection,
    apply_selection,
    available_months,
    available_years,
    filter_cases,
    reconcile_selection,
)
from .logger_config import configure_logger
from .report import AnalyticsReport, ReportConfig, build_report
from .session import AnalyticsSession

__all__ = [
    "ALL",
    "AnalyticsReport",
    "AnalyticsSession",
    "AverageStats",
    "CasePredicate",
    "RateStats",
    "ReportConfig",
    "Selection",
    "SummaryKpis",
    "apply_selection",
    "available_months",
    "available_years",
    "build_report",
    "configure_logger",
    "filter_cases",
    "reconcile_selection",
    "summary_kpis",
    "write_report_workbook",
]
