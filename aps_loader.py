#!/usr/bin/env python3
"""Load an APS workbook and print its partition catalog as JSON."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List

from aps_analytics.logger_config import configure_logger
from aps_analytics.utils import case_to_record
from aps_ingest import Dataset, IngestError, load_workbook
from aps_ingest.partitions import month_label

DATA_PATH_ENV = "APS_DATA_PATH"
DEFAULT_DATA_PATH = Path("aps_data.xls")


def default_workbook() -> Path:
    return Path(os.getenv(DATA_PATH_ENV, str(DEFAULT_DATA_PATH)))


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Read the monthly sheets of an APS workbook and report what was loaded.",
    )
    parser.add_argument(
        "workbook",
        nargs="?",
        type=Path,
        help=f"Workbook (.xls/.xlsx/.csv) to load (default: ${DATA_PATH_ENV} or {DEFAULT_DATA_PATH})",
    )
    parser.add_argument(
        "--cases",
        action="store_true",
        help="Include every normalized case record in the JSON output",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--log-file", type=Path, help="Optional rotating log file")
    return parser


def catalog_payload(path: Path, dataset: Dataset, include_cases: bool = False) -> Dict[str, object]:
    partitions: List[Dict[str, object]] = [
        {
            "label": partition.label,
            "month": month_label(partition.month),
            "year": partition.year,
            "cases": partition.case_count,
        }
        for partition in dataset.partitions
    ]
    payload: Dict[str, object] = {
        "workbook": str(path),
        "total_cases": len(dataset.cases),
        "partitions": partitions,
    }
    if include_cases:
        payload["cases"] = [case_to_record(case) for case in dataset.cases]
    return payload


def main(argv: list[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    configure_logger(level=getattr(logging, args.log_level.upper(), logging.WARNING), log_file=args.log_file)

    path = args.workbook or default_workbook()
    try:
        dataset = load_workbook(path)
    except IngestError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 1

    print(json.dumps(catalog_payload(path, dataset, args.cases), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
