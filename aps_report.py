#!/usr/bin/env python3
"""Aggregate an APS workbook into a multi-sheet Excel report."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Tuple

from aps_analytics import ALL, AnalyticsSession, ReportConfig, configure_logger, write_report_workbook
from aps_analytics.constants import DEFAULT_SEVERE_PAIN_TARGETS, MEDICATION_RANKING_LIMIT, TOP_CATEGORY_LIMIT
from aps_ingest import IngestError
from aps_ingest.partitions import month_index
from aps_loader import DATA_PATH_ENV, DEFAULT_DATA_PATH, default_workbook

DEFAULT_OUTPUT = Path("reports/aps_report.xlsx")

BOOLEAN_FIELDS = {"pain_reduction_50_percent", "complications"}
NUMERIC_FIELDS = {"patient_age", "pain_score_discharge", "satisfaction_score", "proms_improvement"}
INTEGER_FIELDS = {"year", "month"}
TRUE_TEXT = {"true", "yes", "y", "1"}

logger = logging.getLogger("aps_report")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Filter and aggregate APS cases, then write the dashboard sections to Excel.",
    )
    parser.add_argument(
        "workbook",
        nargs="?",
        type=Path,
        help=f"Workbook (.xls/.xlsx/.csv) to load (default: ${DATA_PATH_ENV} or {DEFAULT_DATA_PATH})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"Destination Excel file (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--year",
        help="Year to report on, or 'All' (default: year of the last sheet)",
    )
    parser.add_argument(
        "--month",
        help="Month name (Jan..Dec), number (1-12) or 'All' (default: month of the last sheet)",
    )
    parser.add_argument(
        "--filter",
        dest="filter_expr",
        metavar="FIELD=VALUE",
        help="Narrow every section to cases whose FIELD equals VALUE (e.g. patient_gender=Female)",
    )
    parser.add_argument(
        "--medication-limit",
        type=int,
        default=MEDICATION_RANKING_LIMIT,
        help=f"Number of medications ranked per class (default: {MEDICATION_RANKING_LIMIT})",
    )
    parser.add_argument(
        "--category-limit",
        type=int,
        default=TOP_CATEGORY_LIMIT,
        help=f"Categories kept before folding into 'Other' (default: {TOP_CATEGORY_LIMIT})",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--log-file", type=Path, help="Optional rotating log file")
    return parser


def parse_year(raw: str) -> int | str:
    if raw.strip().lower() == ALL.lower():
        return ALL
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid year: {raw!r}") from exc


def parse_month(raw: str) -> int | str:
    text = raw.strip()
    if text.lower() == ALL.lower():
        return ALL
    if text.isdigit():
        number = int(text)
        if not 1 <= number <= 12:
            raise ValueError(f"Month number out of range: {raw!r}")
        return number - 1
    index = month_index(text)
    if index is None:
        raise ValueError(f"Unknown month: {raw!r}")
    return index


def parse_filter(expr: str) -> Tuple[str, object]:
    field, sep, raw = expr.partition("=")
    field = field.strip()
    raw = raw.strip()
    if not sep or not field:
        raise ValueError(f"Filter must look like FIELD=VALUE, got {expr!r}")
    if field in BOOLEAN_FIELDS:
        return field, raw.lower() in TRUE_TEXT
    try:
        if field in NUMERIC_FIELDS:
            return field, float(raw)
        if field in INTEGER_FIELDS:
            return field, int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {field}: {raw!r}") from exc
    return field, raw


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logger(level=getattr(logging, args.log_level.upper(), logging.INFO), log_file=args.log_file)

    config = ReportConfig(
        severe_pain_targets=dict(DEFAULT_SEVERE_PAIN_TARGETS),
        medication_limit=args.medication_limit,
        category_limit=args.category_limit,
    )
    session = AnalyticsSession(config)
    path = args.workbook or default_workbook()
    try:
        dataset = session.load_workbook(path)
    except IngestError as exc:
        print(f"APS workbook load failed: {exc}", file=sys.stderr)
        return 1

    try:
        if args.year is not None:
            requested = parse_year(args.year)
            selection = session.select_year(requested)
            if selection.year != requested:
                logger.warning("Year %s not in workbook; using %s", requested, selection.year)
        if args.month is not None:
            session.select_month(parse_month(args.month))
        if args.filter_expr:
            session.apply_predicate(*parse_filter(args.filter_expr))
    except ValueError as exc:
        parser.error(str(exc))

    report = session.report()
    args.output.parent.mkdir(parents=True, exist_ok=True)
    write_report_workbook(report, dataset, args.output)

    print(
        f"Loaded {len(dataset.cases)} case(s) from {len(dataset.partitions)} sheet(s); "
        f"{report.kpis.total_cases} case(s) in selection. Wrote report to {args.output}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
