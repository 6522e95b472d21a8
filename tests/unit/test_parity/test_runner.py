"""
test_runner.py - 왕복(round trip) 러너 테스트

DoD:
- 소스 → reference.json / report.html / subject.json / diff.json
- 왕복 결과 일치 (렌더러가 계약을 지키는 한)
- 시나리오 발견 및 expected 고정
"""

import json
from pathlib import Path

import pytest

from src.core.artifacts import dumps_records
from src.domain.errors import StructuralEmptyError
from src.parity.runner import ParityRunner, ParityScenario, discover_scenarios
from src.parity.source_extract import SourceExtractor


@pytest.fixture
def runner(tmp_path: Path) -> ParityRunner:
    return ParityRunner(output_dir=tmp_path / "_parity")


class TestRunSource:
    """단일 문서 왕복."""

    def test_round_trip_passes(self, runner: ParityRunner, basic_results_path: Path):
        result = runner.run_source(basic_results_path)

        assert result.passed
        assert result.report.matched_count == 6
        assert result.run_log.result == "success"
        assert result.run_log.record_count == 6

    def test_outputs_written(self, runner: ParityRunner, basic_results_path: Path):
        result = runner.run_source(basic_results_path)

        for name in ("reference.json", "report.html", "subject.json", "diff.json"):
            assert (result.output_dir / name).exists()
        assert result.output_dir.name == "results"

        diff = json.loads((result.output_dir / "diff.json").read_text(encoding="utf-8"))
        assert diff["summary"]["passed"] is True

    def test_structural_failure_recorded(self, runner: ParityRunner, tmp_path: Path, empty_result_set_xml: str):
        source = tmp_path / "empty.xml"
        source.write_text(empty_result_set_xml, encoding="utf-8")

        with pytest.raises(StructuralEmptyError):
            runner.run_source(source, tmp_path / "out")


class TestScenarios:
    """골든 시나리오."""

    def test_discover(self, tmp_path: Path, basic_results_xml: str):
        (tmp_path / "b_scenario").mkdir()
        (tmp_path / "b_scenario" / "source.xml").write_text(basic_results_xml, encoding="utf-8")
        (tmp_path / "a_scenario").mkdir()
        (tmp_path / "a_scenario" / "source.xml").write_text(basic_results_xml, encoding="utf-8")
        (tmp_path / "not_a_scenario").mkdir()

        scenarios = discover_scenarios(tmp_path)

        assert [s.name for s in scenarios] == ["a_scenario", "b_scenario"]
        assert scenarios[0].expected is None

    def test_load_missing_source(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ParityScenario.load(tmp_path)

    def test_generate_then_run(self, runner: ParityRunner, tmp_path: Path, basic_results_xml: str):
        scenario_dir = tmp_path / "scenario_x"
        scenario_dir.mkdir()
        (scenario_dir / "source.xml").write_text(basic_results_xml, encoding="utf-8")

        written = runner.generate_expected(ParityScenario.load(scenario_dir))
        scenario = ParityScenario.load(scenario_dir)

        assert written == scenario_dir / "expected" / "canonical.json"
        assert len(scenario.expected) == 6
        runner.run_scenario(scenario)

    def test_stale_expected_fails(self, runner: ParityRunner, tmp_path: Path, basic_results_xml: str):
        scenario_dir = tmp_path / "scenario_y"
        (scenario_dir / "expected").mkdir(parents=True)
        (scenario_dir / "source.xml").write_text(basic_results_xml, encoding="utf-8")
        records = SourceExtractor().extract_text(basic_results_xml)[:-1]
        (scenario_dir / "expected" / "canonical.json").write_text(dumps_records(records), encoding="utf-8")

        with pytest.raises(AssertionError, match="HALLUCINATED 'UUT Test/Cleanup\\|1'"):
            runner.run_scenario(ParityScenario.load(scenario_dir))
