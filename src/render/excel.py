"""
Excel (XLSX) diff 리포트: openpyxl 기반.

비교 결과를 시트 단위로 저장:
- Summary: 카운트 + 판정
- Dropped / Hallucinated: 레코드 전체 필드
- Corrupted: 키 + 필드별 expected/actual
"""

import os
import tempfile
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

from src.domain.constants import LIMIT_FIELDS, RECORD_FIELDS
from src.domain.schemas import CanonicalRecord
from src.parity.compare import ComparisonReport

RECORD_COLUMNS = [f for f in RECORD_FIELDS if f != "Limits"] + [
    f"Limits.{name}" for name in LIMIT_FIELDS
]
CORRUPTED_COLUMNS = ["CanonicalKey", "Field", "Expected", "Actual"]


def _record_row(record: CanonicalRecord) -> list[Any]:
    data = record.to_dict()
    limits = data.pop("Limits")
    row = [data[name] for name in RECORD_FIELDS if name != "Limits"]
    row.extend(limits[name] for name in LIMIT_FIELDS)
    return row


def _write_header(ws: Worksheet, columns: list[str]) -> None:
    ws.append(columns)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    ws.freeze_panes = "A2"


def build_diff_workbook(report: ComparisonReport) -> Workbook:
    """
    비교 결과 → Workbook.

    Args:
        report: ComparisonReport

    Returns:
        저장 전 Workbook
    """
    wb = Workbook()

    ws = wb.active
    ws.title = "Summary"
    _write_header(ws, ["Metric", "Value"])
    for key, value in report.summary().items():
        ws.append([key, "PASS" if value is True else "FAIL" if value is False else value])

    for title, records in (("Dropped", report.dropped), ("Hallucinated", report.hallucinated)):
        ws = wb.create_sheet(title)
        _write_header(ws, RECORD_COLUMNS)
        for record in records:
            ws.append(_record_row(record))

    ws = wb.create_sheet("Corrupted")
    _write_header(ws, CORRUPTED_COLUMNS)
    for corrupted in report.corrupted:
        for diff in corrupted.diffs:
            ws.append([corrupted.canonical_key, diff.field, diff.expected, diff.actual])

    return wb


def write_diff_workbook(report: ComparisonReport, output_path: Path) -> Path:
    """
    비교 결과를 XLSX로 저장 (temp → replace).

    Args:
        report: ComparisonReport
        output_path: 출력 경로 (.xlsx)

    Returns:
        저장된 파일 경로
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb = build_diff_workbook(report)

    fd, temp_name = tempfile.mkstemp(dir=output_path.parent, suffix=".tmp.xlsx")
    os.close(fd)
    temp_path = Path(temp_name)
    try:
        wb.save(temp_path)
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()

    return output_path
