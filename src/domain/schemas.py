"""
Data schemas for the parity pipeline.

규칙:
- 필드명 통일: 직렬화 키는 RECORD_FIELDS / LIMIT_FIELDS와 동일
- 레코드는 생성 후 불변 (frozen dataclass)
- 문자열 필드는 null 금지 → 빈 문자열
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.domain.constants import KEY_SEPARATOR, UNKNOWN_KIND

# =============================================================================
# Enums
# =============================================================================

class NodeKind(str, Enum):
    """평탄화된 노드 종류."""
    GROUP = "Group"
    STEP = "Step"
    MEASUREMENT = "Measurement"


class Comparator(str, Enum):
    """
    정규화된 리밋 비교 연산자.

    인식 불가 토큰은 Enum으로 변환하지 않고 원문 그대로 통과시킴.
    """
    GE = "GE"
    GT = "GT"
    LE = "LE"
    LT = "LT"
    EQ = "EQ"
    NE = "NE"
    NONE = "NONE"


# =============================================================================
# Flat Node Variants (TreeFlattener 출력)
# =============================================================================

@dataclass(frozen=True)
class LimitEntry:
    """원본 리밋 후보 (comparator/value 모두 raw)."""
    comparator: str | None
    value: str | None


@dataclass(frozen=True)
class GroupNode:
    """컨테이너 노드."""
    name: str
    depth: int
    node_id: str
    status: str | None = None
    timestamp: str | None = None

    kind = NodeKind.GROUP


@dataclass(frozen=True)
class StepNode:
    """수치 결과가 없는 leaf 노드."""
    name: str
    depth: int
    node_id: str
    status: str | None = None
    timestamp: str | None = None
    limit_candidates: tuple[LimitEntry, ...] = ()
    expected: LimitEntry | None = None

    kind = NodeKind.STEP


@dataclass(frozen=True)
class MeasurementNode:
    """수치 결과(측정값)를 가진 leaf 노드."""
    name: str
    depth: int
    node_id: str
    status: str | None = None
    timestamp: str | None = None
    value: str | None = None
    units: str | None = None
    limit_candidates: tuple[LimitEntry, ...] = ()
    expected: LimitEntry | None = None

    kind = NodeKind.MEASUREMENT


FlatNode = GroupNode | StepNode | MeasurementNode


# =============================================================================
# Canonical Record
# =============================================================================

def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_text(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass(frozen=True)
class Limits:
    """
    리밋 정보.

    limit pair(Low/High) 또는 expected 중 하나만 채워짐.
    """
    low: str | None = None
    low_comp: str = Comparator.NONE.value
    high: str | None = None
    high_comp: str = Comparator.NONE.value
    expected: str | None = None
    expected_comp: str = Comparator.NONE.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "Low": self.low,
            "LowComp": self.low_comp,
            "High": self.high,
            "HighComp": self.high_comp,
            "Expected": self.expected,
            "ExpectedComp": self.expected_comp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Limits":
        """
        Raises:
            ValueError: Limits가 객체(dict)가 아님
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Limits must be an object, got {type(data).__name__}")
        return cls(
            low=_optional_text(data.get("Low")),
            low_comp=_text(data.get("LowComp")) or Comparator.NONE.value,
            high=_optional_text(data.get("High")),
            high_comp=_text(data.get("HighComp")) or Comparator.NONE.value,
            expected=_optional_text(data.get("Expected")),
            expected_comp=_text(data.get("ExpectedComp")) or Comparator.NONE.value,
        )


@dataclass(frozen=True)
class CanonicalRecord:
    """
    정규 레코드: 비교의 최소 단위.

    CanonicalKey = Path + "|" + ExecutionOrdinal
    """
    canonical_key: str
    execution_ordinal: int
    path: str
    kind: str
    step_name: str
    status: str = ""
    value: str = ""
    units: str = ""
    limits: Limits = field(default_factory=Limits)
    timestamp: str = ""

    @staticmethod
    def make_key(path: str, ordinal: int) -> str:
        return f"{path}{KEY_SEPARATOR}{ordinal}"

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용 (키 순서 고정)."""
        return {
            "CanonicalKey": self.canonical_key,
            "ExecutionOrdinal": self.execution_ordinal,
            "Path": self.path,
            "Kind": self.kind,
            "StepName": self.step_name,
            "Status": self.status,
            "Value": self.value,
            "Units": self.units,
            "Limits": self.limits.to_dict(),
            "Timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CanonicalRecord":
        """
        JSON 역직렬화.

        CanonicalKey가 없으면 Path/ExecutionOrdinal로 재구성.
        JSON 숫자 값은 문자열로 변환 (0 → "0").

        Raises:
            ValueError: ExecutionOrdinal이 정수가 아니거나 Limits 형식 오류
        """
        ordinal = data.get("ExecutionOrdinal")
        # bool은 int 하위 타입이라 별도 제외
        if isinstance(ordinal, bool) or not isinstance(ordinal, int):
            raise ValueError(f"ExecutionOrdinal must be an integer, got {ordinal!r}")

        path = _text(data.get("Path"))
        key = _text(data.get("CanonicalKey")) or cls.make_key(path, ordinal)
        return cls(
            canonical_key=key,
            execution_ordinal=ordinal,
            path=path,
            kind=_text(data.get("Kind")) or UNKNOWN_KIND,
            step_name=_text(data.get("StepName")),
            status=_text(data.get("Status")),
            value=_text(data.get("Value")),
            units=_text(data.get("Units")),
            limits=Limits.from_dict(data.get("Limits")),
            timestamp=_text(data.get("Timestamp")),
        )


# =============================================================================
# Logging Schemas
# =============================================================================

@dataclass
class WarningLog:
    """
    경고 로그.

    경고 필수 컨텍스트: level, code, action_id, field_or_slot,
                       original_value, resolved_value, message
    """
    level: str = "warning"
    code: str = ""
    action_id: str = ""
    field_or_slot: str = ""
    original_value: str | None = None
    resolved_value: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "action_id": self.action_id,
            "field_or_slot": self.field_or_slot,
            "original_value": self.original_value,
            "resolved_value": self.resolved_value,
            "message": self.message,
        }


@dataclass
class ParityRunLog:
    """
    실행 로그.

    추출/비교 1회 단위 실행 결과 및 메타데이터.
    """
    run_id: str
    source: str
    started_at: str  # ISO 8601
    finished_at: str | None = None
    result: str = "pending"  # pending, success, failed

    record_count: int | None = None
    records_digest: str | None = None

    warnings: list[WarningLog] = field(default_factory=list)

    error_code: str | None = None
    error_context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "source": self.source,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "record_count": self.record_count,
            "records_digest": self.records_digest,
            "warnings": [w.to_dict() for w in self.warnings],
            "error_code": self.error_code,
            "error_context": self.error_context,
        }
