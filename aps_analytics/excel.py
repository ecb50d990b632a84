from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

import pandas as pd

from aps_ingest.models import Dataset
from aps_ingest.partitions import month_label

from .report import AnalyticsReport
from .utils import partitions_to_frame


logger = logging.getLogger(__name__)

SUMMARY_SHEET = "Summary"
PARTITIONS_SHEET = "Partitions"
SECTION_GAP = 2
MAX_SHEET_NAME = 31


def _summary_rows(report: AnalyticsReport) -> Dict[str, object]:
    rows = dict(report.selection_dict())
    month = report.selection.month
    if isinstance(month, int):
        rows["Month"] = month_label(month)
    rows.update(report.kpis.as_dict())
    return rows


def write_report_workbook(report: AnalyticsReport, dataset: Dataset, output_path: Path) -> None:
    sheet_names = {section: section[:MAX_SHEET_NAME] for section in report.sections}
    with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
        # Pre-create worksheets so the workbook keeps section order
        for sheet_name in [SUMMARY_SHEET, PARTITIONS_SHEET, *sheet_names.values()]:
            writer.book.add_worksheet(sheet_name)
        bold = writer.book.add_format({"bold": True})

        summary = writer.sheets[SUMMARY_SHEET]
        for row_idx, (key, value) in enumerate(_summary_rows(report).items()):
            summary.write(row_idx, 0, key, bold)
            summary.write(row_idx, 1, value)

        partitions_to_frame(dataset.partitions).to_excel(
            writer, sheet_name=PARTITIONS_SHEET, index=False
        )

        for section, frames in report.sections.items():
            sheet_name = sheet_names[section]
            worksheet = writer.sheets[sheet_name]
            row_idx = 0
            for title, frame in frames.items():
                worksheet.write(row_idx, 0, title, bold)
                frame.to_excel(writer, sheet_name=sheet_name, startrow=row_idx + 1, index=False)
                row_idx += len(frame) + 2 + SECTION_GAP
    logger.info("Wrote report workbook to %s", output_path)
