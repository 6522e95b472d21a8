"""
해시 계산: 정규 레코드 배열 digest

규칙:
- 레코드 순서 유지 (순회 순서 자체가 계약의 일부)
- 키 순서는 직렬화 정의 순서 그대로
- SHA-256
"""

import hashlib
import json
from collections.abc import Iterable
from src.domain.schemas import CanonicalRecord


def compute_records_digest(records: Iterable[CanonicalRecord]) -> str:
    """
    정규 레코드 배열 해시 계산.

    동일 입력 2회 추출 → 동일 digest (결정론 검증용).

    Args:
        records: 정규 레코드 (순회 순서)

    Returns:
        SHA-256 해시 문자열
    """
    payload = [record.to_dict() for record in records]
    serialized = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()

