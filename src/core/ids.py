"""
ID 생성: run_id, 출력 디렉터리용 slug

규칙:
- run_id는 실행마다 새로 발급
- slug는 결정론적 (동일 입력 → 동일 slug)
"""

import uuid
from datetime import UTC, datetime

from src.domain.constants import RUN_ID_PREFIX


def generate_run_id() -> str:
    """
    Run ID 생성.

    고유성 보장: UUID v4
    포맷: RUN-{timestamp}-{uuid[:8]}

    Returns:
        run_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S")
    unique = uuid.uuid4().hex[:8]

    return f"{RUN_ID_PREFIX}{timestamp}-{unique}"


def slugify_source_name(value: str) -> str:
    """
    소스 파일명을 출력 디렉터리 이름으로 정리.

    - 공백/하이픈/경로 구분자 → 밑줄
    - 특수문자/비ASCII 제거
    - 최대 40자
    """
    sanitized = ""
    for c in value:
        if c.isascii() and c.isalnum():
            sanitized += c
        elif c in " _-./\\":
            sanitized += "_"

    while "__" in sanitized:
        sanitized = sanitized.replace("__", "_")

    sanitized = sanitized.strip("_")

    return sanitized[:40] if sanitized else "UNKNOWN"
