"""
정규 레코드 배열 입출력.

- 원자적 쓰기: temp → rename (중간 상태 없음)
- 출력 포맷: UTF-8 JSON, indent=2, 비ASCII 보존
- 동일 레코드 → 동일 바이트 (결정론)
"""

import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any

from src.domain.schemas import CanonicalRecord

logger = logging.getLogger(__name__)


def _fsync_dir(dir_path: Path) -> None:
    """디렉토리 fsync (rename 엔트리 내구성). 실패 시 경고만."""
    try:
        dir_fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except (OSError, AttributeError) as e:
        # O_DIRECTORY 미지원 (Windows) 등
        logger.debug(f"Directory fsync skipped for {dir_path}: {e}")


def atomic_write_text(path: Path, text: str) -> None:
    """
    원자적 텍스트 쓰기.

    동작:
    - 중간 상태 없음: temp → replace
    - 실패 시 cleanup: temp 파일 삭제
    - 기존 파일 보존: replace 실패 시 원본 유지

    Args:
        path: 저장할 파일 경로
        text: 파일 내용
    """
    dir_path = path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    temp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=dir_path,
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="\n",
        ) as f:
            temp_path = Path(f.name)
            f.write(text)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning(
                    f"File fsync failed for {path}: {e}. "
                    f"Data may not be durable on power loss."
                )

        os.replace(temp_path, path)
        _fsync_dir(dir_path)

    except Exception:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise


def atomic_write_json(path: Path, data: Any) -> None:
    """원자적 JSON 쓰기 (indent=2, 비ASCII 보존)."""
    atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def dumps_records(records: list[CanonicalRecord]) -> str:
    """정규 레코드 배열 → JSON 텍스트."""
    payload = [record.to_dict() for record in records]
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_records(records: list[CanonicalRecord], output: Path | None = None) -> None:
    """
    정규 레코드 배열 출력.

    Args:
        records: 순회 순서의 레코드
        output: 출력 경로 (None이면 stdout)
    """
    text = dumps_records(records)
    if output is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    atomic_write_text(output, text)


def load_records(path: Path) -> list[CanonicalRecord]:
    """
    정규 레코드 배열 로드.

    Args:
        path: JSON 파일 경로

    Returns:
        파일 순서 그대로의 레코드

    Raises:
        FileNotFoundError: 파일 없음
        ValueError: JSON 배열이 아니거나 항목이 객체가 아님
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Canonical array expected in {path}, got {type(data).__name__}")

    records = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Record {index} in {path} is not an object")
        records.append(CanonicalRecord.from_dict(item))
    return records
