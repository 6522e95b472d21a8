"""
test_diff_workbook.py - diff 리포트 워크북 테스트

DoD:
- Summary / Dropped / Hallucinated / Corrupted 시트
- Limits 하위 필드는 Limits.* 열로 펼침
- 저장은 temp → replace
"""

from pathlib import Path

from openpyxl import load_workbook

from src.domain.schemas import CanonicalRecord, Limits
from src.parity.compare import compare_records
from src.render.excel import RECORD_COLUMNS, build_diff_workbook, write_diff_workbook


def make_record(path: str, status: str = "Passed") -> CanonicalRecord:
    return CanonicalRecord(
        canonical_key=f"{path}|1",
        execution_ordinal=1,
        path=path,
        kind="Measurement",
        step_name=path,
        status=status,
        value="5",
        units="V",
        limits=Limits(low="4.5", low_comp="GE"),
    )


class TestBuildDiffWorkbook:
    def test_sheets(self):
        wb = build_diff_workbook(compare_records([], []))

        assert wb.sheetnames == ["Summary", "Dropped", "Hallucinated", "Corrupted"]

    def test_summary_verdict(self):
        wb = build_diff_workbook(compare_records([make_record("A")], []))
        rows = {row[0]: row[1] for row in wb["Summary"].iter_rows(min_row=2, values_only=True)}

        assert rows["dropped"] == 1
        assert rows["passed"] == "FAIL"

    def test_record_columns(self):
        wb = build_diff_workbook(compare_records([], [make_record("B")]))
        ws = wb["Hallucinated"]
        header = [c.value for c in ws[1]]
        row = dict(zip(header, [c.value for c in ws[2]]))

        assert header == RECORD_COLUMNS
        assert "Limits" not in header
        assert row["CanonicalKey"] == "B|1"
        assert row["Limits.Low"] == "4.5"
        assert row["Limits.LowComp"] == "GE"
        assert row["Limits.High"] is None

    def test_corrupted_rows(self):
        wb = build_diff_workbook(
            compare_records([make_record("C", "Passed")], [make_record("C", "Failed")])
        )
        rows = list(wb["Corrupted"].iter_rows(min_row=2, values_only=True))

        assert rows == [("C|1", "Status", "Passed", "Failed")]


class TestWriteDiffWorkbook:
    def test_write(self, tmp_path: Path):
        path = write_diff_workbook(compare_records([make_record("A")], []), tmp_path / "out" / "diff.xlsx")

        assert load_workbook(path)["Dropped"]["A2"].value == "A|1"
        assert list((tmp_path / "out").glob("*.tmp.xlsx")) == []
