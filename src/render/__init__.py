"""
Render layer: 정규 레코드 / 비교 결과 출력.

역할:
- 어노테이션이 삽입된 HTML 리포트 (jinja2)
- diff 리포트 워크북 (openpyxl)
"""

from .html import HtmlReportRenderer, render_html
from .excel import build_diff_workbook, write_diff_workbook

__all__ = [
    "render_html",
    "write_diff_workbook",
    "build_diff_workbook",
    "HtmlReportRenderer",
]
