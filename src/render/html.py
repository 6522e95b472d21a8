"""
HTML 리포트 렌더러: Jinja2 기반.

역할:
- 정규 레코드 → 접이식 표 형태의 HTML 리포트
- 각 행에 data-parity-* 어노테이션 삽입 (추출기 계약)
- 값은 autoescape로 이스케이프, 추출 시 디코드

시각 구조(열 구성, 들여쓰기, CSS 클래스)는 계약이 아님.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.core.artifacts import atomic_write_text
from src.domain.constants import (
    ANNOTATION_PREFIX,
    PATH_SEPARATOR,
)
from src.domain.schemas import CanonicalRecord, NodeKind

TEMPLATES_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE = "report.html.j2"


@dataclass
class ReportRow:
    """템플릿에 전달되는 행 정보."""
    id: str
    parent: str | None
    css_class: str
    indent: int
    record: CanonicalRecord
    annotations: list[tuple[str, str]]


def build_annotations(record: CanonicalRecord) -> list[tuple[str, str]]:
    """
    레코드 → 어노테이션 (key, value) 목록.

    키 순서는 ANNOTATION_KEYS와 동일. None → "".
    """
    limits = record.limits

    def text(value: Any) -> str:
        return "" if value is None else str(value)

    return [
        ("path", record.path),
        ("ordinal", str(record.execution_ordinal)),
        ("kind", record.kind),
        ("name", record.step_name),
        ("status", record.status),
        ("value", record.value),
        ("units", record.units),
        ("low", text(limits.low)),
        ("lowcomp", limits.low_comp),
        ("high", text(limits.high)),
        ("highcomp", limits.high_comp),
        ("expected", text(limits.expected)),
        ("expectedcomp", limits.expected_comp),
        ("timestamp", record.timestamp),
    ]


def build_rows(records: list[CanonicalRecord]) -> list[ReportRow]:
    """
    행 목록 생성.

    data-parent: 가장 최근에 열린, 경로가 부모 경로와 같은 그룹 행.
    """
    rows: list[ReportRow] = []
    open_groups: dict[str, str] = {}  # group path → row id

    for index, record in enumerate(records):
        parent_path = record.path.rpartition(PATH_SEPARATOR)[0]
        depth = record.path.count(PATH_SEPARATOR)
        row_id = f"r{index}"
        is_group = record.kind == NodeKind.GROUP.value

        rows.append(ReportRow(
            id=row_id,
            parent=open_groups.get(parent_path) if parent_path else None,
            css_class="group" if is_group else "step",
            indent=depth,
            record=record,
            annotations=build_annotations(record),
        ))

        if is_group:
            open_groups[record.path] = row_id

    return rows


class HtmlReportRenderer:
    """
    HTML 리포트 렌더러.

    Usage:
        renderer = HtmlReportRenderer()
        renderer.render(records, output_path, title="UUT Test")
    """

    def __init__(
        self,
        templates_dir: Path | None = None,
        template_name: str = DEFAULT_TEMPLATE,
        annotation_prefix: str = ANNOTATION_PREFIX,
    ):
        """
        Args:
            templates_dir: 템플릿 디렉터리 (기본: src/render/templates)
            template_name: 템플릿 파일명
            annotation_prefix: 어노테이션 속성 접두사
        """
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "j2"]),
            keep_trailing_newline=True,
        )
        self.template_name = template_name
        self.annotation_prefix = annotation_prefix

    def render_string(self, records: list[CanonicalRecord], title: str | None = None) -> str:
        """레코드 → HTML 문자열."""
        if title is None:
            title = records[0].path.split(PATH_SEPARATOR)[0] if records else "Report"

        template = self.env.get_template(self.template_name)
        return template.render(
            title=title,
            prefix=self.annotation_prefix,
            rows=build_rows(records),
        )

    def render(
        self,
        records: list[CanonicalRecord],
        output_path: Path,
        title: str | None = None,
    ) -> Path:
        """
        레코드를 HTML 파일로 렌더링.

        Args:
            records: 정규 레코드 (순회 순서)
            output_path: 출력 경로
            title: 리포트 제목 (기본: 첫 레코드의 루트 세그먼트)

        Returns:
            출력 경로
        """
        atomic_write_text(output_path, self.render_string(records, title))
        return output_path


def render_html(
    records: list[CanonicalRecord],
    output_path: Path,
    title: str | None = None,
) -> Path:
    """간편 함수: 기본 템플릿으로 렌더링."""
    return HtmlReportRenderer().render(records, output_path, title)
