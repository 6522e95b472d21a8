"""
Run logging: run log schema, warnings

규칙:
- 경고 필수 컨텍스트: level, code, action_id, field_or_slot,
                    original_value, resolved_value, message
- 경고는 run log에 누적 + 표준 logging으로도 출력
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.core.artifacts import atomic_write_json
from src.core.ids import generate_run_id
from src.domain.schemas import ParityRunLog, WarningLog

logger = logging.getLogger(__name__)

# =============================================================================
# Run Log Management
# =============================================================================


def create_run_log(source: str) -> ParityRunLog:
    """
    새 ParityRunLog 생성.

    Args:
        source: 추출/비교 대상 (경로 또는 설명)

    Returns:
        초기화된 ParityRunLog
    """
    now = datetime.now(UTC).isoformat()
    run_id = generate_run_id()

    return ParityRunLog(
        run_id=run_id,
        source=source,
        started_at=now,
        result="pending",
    )


def emit_warning(
    run_log: ParityRunLog | None,
    code: str,
    action_id: str,
    field_or_slot: str,
    message: str,
    original_value: str | None = None,
    resolved_value: str | None = None,
) -> None:
    """
    경고 이벤트 기록.

    run_log가 None이면 logging 출력만 수행.

    Args:
        run_log: ParityRunLog 인스턴스
        code: 경고 코드 (ErrorCodes)
        action_id: 액션 ID (예: fragment_12)
        field_or_slot: 필드 이름
        message: 경고 메시지
        original_value: 원래 값
        resolved_value: 해결된 값
    """
    logger.warning(f"[{code}] {action_id} {field_or_slot}: {message}")

    if run_log is None:
        return

    warning = WarningLog(
        level="warning",
        code=code,
        action_id=action_id,
        field_or_slot=field_or_slot,
        original_value=original_value,
        resolved_value=resolved_value,
        message=message,
    )
    run_log.warnings.append(warning)


def complete_run_log(
    run_log: ParityRunLog,
    success: bool,
    record_count: int | None = None,
    records_digest: str | None = None,
    error_code: str | None = None,
    error_context: dict[str, Any] | None = None,
) -> None:
    """
    ParityRunLog 완료 처리.

    Args:
        run_log: ParityRunLog 인스턴스
        success: 성공 여부
        record_count: 추출된 레코드 수
        records_digest: 레코드 배열 해시
        error_code: 에러 코드 (실패 시)
        error_context: 에러 컨텍스트 (실패 시)
    """
    now = datetime.now(UTC).isoformat()
    run_log.finished_at = now
    run_log.result = "success" if success else "failed"
    run_log.record_count = record_count
    run_log.records_digest = records_digest

    if not success:
        run_log.error_code = error_code
        run_log.error_context = error_context


def save_run_log(run_log: ParityRunLog, logs_dir: Path) -> Path:
    """
    ParityRunLog를 파일로 저장.

    Args:
        run_log: ParityRunLog 인스턴스
        logs_dir: logs/ 디렉터리 경로

    Returns:
        저장된 파일 경로
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"run_{run_log.run_id}.json"
    atomic_write_json(log_path, run_log.to_dict())
    return log_path


def load_run_log(log_path: Path) -> dict[str, Any]:
    """
    ParityRunLog 파일 로드.

    Args:
        log_path: 로그 파일 경로

    Returns:
        RunLog 데이터 (dict)
    """
    data: dict[str, Any] = json.loads(log_path.read_text(encoding="utf-8"))
    return data
