"""
Error definitions for the parity pipeline.

규칙:
- 조용한 실패 금지 → 입력 자체가 비교 불가능하면 ParityError로 명시적 실패
- 어노테이션 누락/필드 불일치 → 치명적이지 않음 (경고/diff로 누적)
"""

from typing import Any

from src.domain.constants import EXIT_STRUCTURAL_FAILURE, EXIT_VALIDATION_FAILURE


class ParityError(Exception):
    """
    추출 단계에서 비교 자체가 무의미해질 때 발생하는 에러.

    Usage:
        raise MalformedInputError(ErrorCodes.MALFORMED_INPUT, path=str(path), cause=str(e))
    """

    exit_code = EXIT_VALIDATION_FAILURE

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            **self.context,
        }


class InputNotFoundError(ParityError):
    """소스 경로가 존재하지 않음."""


class EmptyInputError(ParityError):
    """소스 내용이 비어 있음."""


class MalformedInputError(ParityError):
    """기대하는 트리 형태로 파싱 불가."""


class StructuralEmptyError(ParityError):
    """순회 결과 노드 0개."""

    exit_code = EXIT_STRUCTURAL_FAILURE


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러/경고 코드 상수."""

    # === Fatal (extract) ===
    INPUT_NOT_FOUND = "INPUT_NOT_FOUND"
    EMPTY_INPUT = "EMPTY_INPUT"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    STRUCTURAL_EMPTY = "STRUCTURAL_EMPTY"

    # === Recoverable (per fragment / per field) ===
    ANNOTATION_MISSING = "ANNOTATION_MISSING"  # warning, fragment skipped
    ANNOTATION_INVALID = "ANNOTATION_INVALID"  # warning, fragment skipped
    FIELD_MISMATCH = "FIELD_MISMATCH"          # accumulated into diff
    DUPLICATE_KEY = "DUPLICATE_KEY"

    # === Passthrough (at most logged) ===
    TIMESTAMP_PARSE_FALLBACK = "TIMESTAMP_PARSE_FALLBACK"
    UNKNOWN_COMPARATOR_TOKEN = "UNKNOWN_COMPARATOR_TOKEN"
