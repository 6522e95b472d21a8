"""
test_run_logging.py - 실행 로그 / 경고 테스트

DoD:
- run log 생성 → 완료 → 저장 → 로드
- 경고는 필수 컨텍스트와 함께 누적
- run_log 없이도 경고 출력 가능
"""

import logging
from pathlib import Path

import pytest

from src.core.logging import (
    complete_run_log,
    create_run_log,
    emit_warning,
    load_run_log,
    save_run_log,
)
from src.domain.errors import ErrorCodes


class TestRunLog:
    def test_create(self):
        run_log = create_run_log("results.xml")

        assert run_log.run_id.startswith("RUN-")
        assert run_log.source == "results.xml"
        assert run_log.result == "pending"
        assert run_log.finished_at is None

    def test_complete_success(self):
        run_log = create_run_log("results.xml")

        complete_run_log(run_log, success=True, record_count=3, records_digest="abc")

        assert run_log.result == "success"
        assert run_log.record_count == 3
        assert run_log.records_digest == "abc"
        assert run_log.error_code is None
        assert run_log.finished_at is not None

    def test_complete_failure(self):
        run_log = create_run_log("results.xml")

        complete_run_log(
            run_log,
            success=False,
            error_code=ErrorCodes.MALFORMED_INPUT,
            error_context={"path": "results.xml"},
        )

        assert run_log.result == "failed"
        assert run_log.error_code == "MALFORMED_INPUT"
        assert run_log.error_context == {"path": "results.xml"}

    def test_save_and_load(self, tmp_path: Path):
        run_log = create_run_log("results.xml")
        emit_warning(run_log, "CODE", "action", "field", "message")
        complete_run_log(run_log, success=True, record_count=1)

        path = save_run_log(run_log, tmp_path / "logs")
        data = load_run_log(path)

        assert path.name == f"run_{run_log.run_id}.json"
        assert data["result"] == "success"
        assert data["warnings"][0]["code"] == "CODE"


class TestEmitWarning:
    def test_appends_context(self):
        run_log = create_run_log("report.html")

        emit_warning(
            run_log,
            code=ErrorCodes.ANNOTATION_INVALID,
            action_id="fragment_0@line3",
            field_or_slot="ordinal",
            message="ordinal is not a positive integer",
            original_value="abc",
        )

        warning = run_log.warnings[0]
        assert warning.level == "warning"
        assert warning.code == "ANNOTATION_INVALID"
        assert warning.original_value == "abc"
        assert warning.resolved_value is None

    def test_logs_without_run_log(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="src.core.logging"):
            emit_warning(None, "CODE", "action", "field", "something happened")

        assert "[CODE] action field: something happened" in caplog.text
