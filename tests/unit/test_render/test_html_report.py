"""
test_html_report.py - HTML 리포트 렌더러 테스트

DoD:
- 레코드마다 data-parity-* 14개 키 삽입
- 값 이스케이프 (속성 값 안의 따옴표/꺾쇠)
- data-parent: 부모 그룹 행 참조
"""

from pathlib import Path

import pytest

from src.domain.constants import ANNOTATION_KEYS
from src.domain.schemas import CanonicalRecord, Limits
from src.parity.embedded_extract import EmbeddedExtractor
from src.render.html import HtmlReportRenderer, build_annotations, build_rows, render_html


@pytest.fixture
def records() -> list[CanonicalRecord]:
    return [
        CanonicalRecord("Root|1", 1, "Root", "Group", "Root", status="Passed"),
        CanonicalRecord("Root/Grp|1", 1, "Root/Grp", "Group", "Grp"),
        CanonicalRecord(
            "Root/Grp/V|1", 1, "Root/Grp/V", "Measurement", "V",
            status="Passed", value="5", units="V",
            limits=Limits(low="4.5", low_comp="GE", high="5.5", high_comp="LE"),
            timestamp="09:30:02 - 15JAN2024",
        ),
        CanonicalRecord('Root/a "quoted" <step>|1', 1, 'Root/a "quoted" <step>', "Step", 'a "quoted" <step>'),
    ]


class TestAnnotations:
    def test_all_keys_in_order(self, records: list[CanonicalRecord]):
        annotations = build_annotations(records[2])

        assert tuple(key for key, _ in annotations) == ANNOTATION_KEYS

    def test_none_limits_empty(self, records: list[CanonicalRecord]):
        annotations = dict(build_annotations(records[0]))

        assert annotations["low"] == ""
        assert annotations["lowcomp"] == "NONE"
        assert annotations["ordinal"] == "1"


class TestRows:
    def test_parent_links(self, records: list[CanonicalRecord]):
        rows = build_rows(records)

        assert [r.parent for r in rows] == [None, "r0", "r1", "r0"]
        assert [r.css_class for r in rows] == ["group", "group", "step", "step"]
        assert [r.indent for r in rows] == [0, 1, 2, 1]


class TestRender:
    def test_render_string(self, records: list[CanonicalRecord]):
        html = HtmlReportRenderer().render_string(records)

        assert "<title>Root</title>" in html
        assert 'data-parity-path="Root/Grp/V"' in html
        assert 'data-parity-lowcomp="GE"' in html

    def test_values_escaped(self, records: list[CanonicalRecord]):
        html = HtmlReportRenderer().render_string(records)

        assert 'data-parity-name="a &#34;quoted&#34; &lt;step&gt;"' in html

    def test_custom_prefix(self, records: list[CanonicalRecord]):
        html = HtmlReportRenderer(annotation_prefix="data-x-").render_string(records)

        assert 'data-x-path="Root"' in html
        assert "data-parity-" not in html

    def test_render_file_extracts_back(self, records: list[CanonicalRecord], tmp_path: Path):
        path = render_html(records, tmp_path / "report.html", title="Run")

        assert EmbeddedExtractor().extract_path(path) == [
            CanonicalRecord(
                r.canonical_key, r.execution_ordinal, r.path, r.kind, r.step_name,
                r.status, r.value, r.units,
                Limits(
                    low=r.limits.low or "", low_comp=r.limits.low_comp,
                    high=r.limits.high or "", high_comp=r.limits.high_comp,
                    expected=r.limits.expected or "", expected_comp=r.limits.expected_comp,
                ),
                r.timestamp,
            )
            for r in records
        ]
