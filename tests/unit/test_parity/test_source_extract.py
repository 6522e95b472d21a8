"""
test_source_extract.py - 소스 문서 정규 추출 테스트

DoD:
- 문서 → 순회 순서의 정규 레코드 배열
- 입력 없음/빈 입력/파싱 불가 → 검증 실패 (exit 1)
- 노드 0개 → 구조 실패 (exit 2)
- 동일 입력 2회 추출 → 동일 결과 (결정론)
- 타임스탬프/연산자 통과 시 run log 경고
"""

from pathlib import Path

import pytest

from src.core.config import ParityConfig
from src.core.hashing import compute_records_digest
from src.core.logging import create_run_log
from src.domain.constants import EXIT_STRUCTURAL_FAILURE, EXIT_VALIDATION_FAILURE
from src.domain.errors import (
    EmptyInputError,
    ErrorCodes,
    InputNotFoundError,
    MalformedInputError,
    StructuralEmptyError,
)
from src.parity.source_extract import SourceExtractor, extract_source


@pytest.fixture
def extractor() -> SourceExtractor:
    return SourceExtractor()


# =============================================================================
# 정상 케이스
# =============================================================================

class TestExtractRecords:
    """레코드 생성."""

    def test_record_paths_and_ordinals(self, extractor: SourceExtractor, basic_results_xml: str):
        records = extractor.extract_text(basic_results_xml)

        assert [r.canonical_key for r in records] == [
            "UUT Test|1",
            "UUT Test/Cold_Start|1",
            "UUT Test/Cold_Start/Voltage_Check|1",
            "UUT Test/Cold_Start/Retry|1",
            "UUT Test/Cold_Start/Retry|2",
            "UUT Test/Cleanup|1",
        ]

    def test_measurement_record(self, extractor: SourceExtractor, basic_results_xml: str):
        record = extractor.extract_text(basic_results_xml)[2]

        assert record.path == "UUT Test/Cold_Start/Voltage_Check"
        assert record.execution_ordinal == 1
        assert record.kind == "Measurement"
        assert record.step_name == "Voltage_Check"
        assert record.status == "Passed"
        assert record.value == "5"
        assert record.units == "V"
        assert record.limits.low == "4.5"
        assert record.limits.low_comp == "GE"
        assert record.limits.high == "5.5"
        assert record.limits.high_comp == "LE"
        assert record.limits.expected is None
        assert record.timestamp == "09:30:02 - 15JAN2024"

    def test_group_and_step_have_empty_value(self, extractor: SourceExtractor, basic_results_xml: str):
        records = extractor.extract_text(basic_results_xml)
        group, step = records[1], records[3]

        assert group.kind == "Group"
        assert group.value == ""
        assert group.units == ""
        assert step.kind == "Step"
        assert step.value == ""

    def test_missing_fields_are_empty_strings(self, extractor: SourceExtractor, basic_results_xml: str):
        cleanup = extractor.extract_text(basic_results_xml)[-1]

        assert cleanup.status == "Done"
        assert cleanup.timestamp == ""
        assert cleanup.limits.low_comp == "NONE"

    def test_uut_test_scenario(self, extractor: SourceExtractor, bare_results_xml: str):
        records = extractor.extract_text(bare_results_xml)

        assert records[-1].path == "UUT Test/Cold_Start/Voltage_Check"
        assert records[-1].value == "5.01"
        assert records[-1].units == "V"

    def test_path_segment_count_matches_depth(self, extractor: SourceExtractor, basic_results_xml: str):
        records = extractor.extract_text(basic_results_xml)
        depths = [0, 1, 2, 2, 2, 1]

        assert [r.path.count("/") for r in records] == depths

    def test_canonical_keys_unique(self, extractor: SourceExtractor, basic_results_xml: str):
        """반복 실행(Retry ×2) 포함 배열에서도 키 중복 없음"""
        records = extractor.extract_text(basic_results_xml)

        assert len({r.canonical_key for r in records}) == len(records)

    def test_empty_root_name_keeps_hierarchy(self, extractor: SourceExtractor):
        records = extractor.extract_text(
            '<ResultSet ID="" name="#MainSequence">'
            '<TestGroup callerName="Cold_Start"><Test callerName="Step"/></TestGroup>'
            "</ResultSet>"
        )

        assert [r.path for r in records] == ["", "/Cold_Start", "/Cold_Start/Step"]
        assert [len(r.path.split("/")) for r in records] == [1, 2, 3]

    def test_root_without_formatted_name_uses_id(self, extractor: SourceExtractor):
        records = extractor.extract_text(
            '<ResultSet ID="RS-7" name="#MainSequence"><Test callerName="Step"/></ResultSet>'
        )

        assert [r.canonical_key for r in records] == ["RS-7|1", "RS-7/Step|1"]

    def test_extract_path(self, basic_results_path: Path):
        records = extract_source(basic_results_path)

        assert len(records) == 6

    def test_accepts_bytes(self, extractor: SourceExtractor, basic_results_xml: str):
        records = extractor.extract_text(basic_results_xml.encode("utf-8"))

        assert len(records) == 6


class TestDeterminism:
    """결정론."""

    def test_same_input_same_output(self, basic_results_path: Path):
        first = SourceExtractor().extract_path(basic_results_path)
        second = SourceExtractor().extract_path(basic_results_path)

        assert first == second
        assert compute_records_digest(first) == compute_records_digest(second)

    def test_extractor_reuse_restarts_ordinals(self, extractor: SourceExtractor, basic_results_xml: str):
        first = extractor.extract_text(basic_results_xml)
        second = extractor.extract_text(basic_results_xml)

        assert first == second


class TestConfig:
    def test_custom_timestamp_format(self):
        xml = "<ResultSet name='R' startDateTime='15.01.2024 09:30:00'/>"
        config = ParityConfig(timestamp_formats=("%d.%m.%Y %H:%M:%S",))

        records = SourceExtractor(config).extract_text(xml)

        assert records[0].timestamp == "09:30:00 - 15JAN2024"


# =============================================================================
# 경고 (passthrough)
# =============================================================================

class TestFallbackWarnings:
    """정규화 실패 값은 원문 유지 + 경고."""

    def test_timestamp_fallback_warning(self):
        run_log = create_run_log("inline")
        xml = "<ResultSet name='R' startDateTime='not a date'/>"

        records = SourceExtractor(run_log=run_log).extract_text(xml)

        assert records[0].timestamp == "not a date"
        codes = [w.code for w in run_log.warnings]
        assert codes == [ErrorCodes.TIMESTAMP_PARSE_FALLBACK]

    def test_unknown_comparator_warning(self):
        run_log = create_run_log("inline")
        xml = (
            "<ResultSet name='R'><Test callerName='T'><TestResult><TestLimits><Limits>"
            "<Expected comparator='CASEINSENSITIVE'><Datum value='ok'/></Expected>"
            "</Limits></TestLimits></TestResult></Test></ResultSet>"
        )

        records = SourceExtractor(run_log=run_log).extract_text(xml)

        assert records[1].limits.expected == "ok"
        assert records[1].limits.expected_comp == "CASEINSENSITIVE"
        assert [w.code for w in run_log.warnings] == [ErrorCodes.UNKNOWN_COMPARATOR_TOKEN]


# =============================================================================
# 실패 케이스
# =============================================================================

class TestFailures:
    """치명적 실패."""

    def test_missing_path(self, extractor: SourceExtractor, tmp_path: Path):
        with pytest.raises(InputNotFoundError) as exc_info:
            extractor.extract_path(tmp_path / "nope.xml")

        assert exc_info.value.code == ErrorCodes.INPUT_NOT_FOUND
        assert exc_info.value.exit_code == EXIT_VALIDATION_FAILURE

    def test_directory_path(self, extractor: SourceExtractor, tmp_path: Path):
        with pytest.raises(InputNotFoundError):
            extractor.extract_path(tmp_path)

    def test_empty_file(self, extractor: SourceExtractor, tmp_path: Path):
        path = tmp_path / "empty.xml"
        path.write_text("  \n", encoding="utf-8")

        with pytest.raises(EmptyInputError) as exc_info:
            extractor.extract_path(path)

        assert exc_info.value.exit_code == EXIT_VALIDATION_FAILURE

    def test_unparseable(self, extractor: SourceExtractor):
        with pytest.raises(MalformedInputError) as exc_info:
            extractor.extract_text("<ResultSet><Test></ResultSet>")

        assert exc_info.value.code == ErrorCodes.MALFORMED_INPUT
        assert "cause" in exc_info.value.context

    def test_entity_expansion_rejected(self, extractor: SourceExtractor):
        xml = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE r [<!ENTITY a "aaaa">]>'
            "<ResultSet name='&a;'/>"
        )
        with pytest.raises(MalformedInputError):
            extractor.extract_text(xml)

    def test_unknown_document_element(self, extractor: SourceExtractor):
        with pytest.raises(MalformedInputError):
            extractor.extract_text("<html><body/></html>")

    def test_no_nodes_is_structural(self, extractor: SourceExtractor, empty_result_set_xml: str):
        with pytest.raises(StructuralEmptyError) as exc_info:
            extractor.extract_text(empty_result_set_xml)

        assert exc_info.value.code == ErrorCodes.STRUCTURAL_EMPTY
        assert exc_info.value.exit_code == EXIT_STRUCTURAL_FAILURE
