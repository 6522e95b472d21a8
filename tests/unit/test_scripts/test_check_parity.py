"""
test_check_parity.py - 디렉터리 일괄 parity 검사 테스트

DoD:
- 하위 디렉터리 포함 *.xml 전부 검사
- 문서별 출력 디렉터리 + run log
- 입력 오류는 errors로 집계, 종료 코드 2
"""

import sys
from pathlib import Path

import pytest

# scripts 디렉터리를 path에 추가
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent / "scripts"))

from check_parity import BatchResult, check_directory  # noqa: E402

from src.parity.runner import ParityRunner  # noqa: E402


@pytest.fixture
def source_dir(tmp_path: Path, basic_results_xml: str) -> Path:
    root = tmp_path / "results"
    (root / "line_a").mkdir(parents=True)
    (root / "line_b").mkdir(parents=True)
    (root / "line_a" / "run.xml").write_text(basic_results_xml, encoding="utf-8")
    (root / "line_b" / "run.xml").write_text(basic_results_xml, encoding="utf-8")
    (root / "notes.txt").write_text("ignored", encoding="utf-8")
    return root


class TestBatchResult:
    def test_exit_codes(self):
        assert BatchResult(scanned=2, passed=2).exit_code == 0
        assert BatchResult(scanned=2, passed=1, failed=1).exit_code == 1
        assert BatchResult(scanned=1, errors=["x"]).exit_code == 2

    def test_to_dict(self):
        assert BatchResult(scanned=1, passed=1).to_dict() == {
            "scanned": 1,
            "passed": 1,
            "failed": 0,
            "errors": [],
        }


class TestCheckDirectory:
    def test_all_pass(self, source_dir: Path, tmp_path: Path):
        runner = ParityRunner(output_dir=tmp_path / "_parity")

        result = check_directory(source_dir, runner)

        assert result.scanned == 2
        assert result.passed == 2
        assert result.exit_code == 0

    def test_same_stem_in_different_dirs(self, source_dir: Path, tmp_path: Path):
        output_dir = tmp_path / "_parity"

        check_directory(source_dir, ParityRunner(output_dir=output_dir))

        assert (output_dir / "line_a_run" / "diff.json").exists()
        assert (output_dir / "line_b_run" / "diff.json").exists()
        assert len(list((output_dir / "line_a_run" / "logs").glob("run_*.json"))) == 1

    def test_errors_collected(self, source_dir: Path, tmp_path: Path):
        (source_dir / "broken.xml").write_text("<ResultSet>", encoding="utf-8")

        result = check_directory(source_dir, ParityRunner(output_dir=tmp_path / "_parity"))

        assert result.scanned == 3
        assert result.passed == 2
        assert len(result.errors) == 1
        assert "MALFORMED_INPUT" in result.errors[0]
        assert result.exit_code == 2
