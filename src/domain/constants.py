"""
Domain Constants: 파이프라인 전역 상수.

어노테이션 키, 경로 placeholder, 종료 코드, 파일명 정책 등
추출기/비교기 전반에서 공유하는 값들.
"""

# =============================================================================
# Canonical Record Fields (정규 레코드 필드)
# =============================================================================
# 직렬화 순서 = 필드 정의 순서. 출력 바이트 동일성(결정론)에 영향.

RECORD_FIELDS = (
    "CanonicalKey",
    "ExecutionOrdinal",
    "Path",
    "Kind",
    "StepName",
    "Status",
    "Value",
    "Units",
    "Limits",
    "Timestamp",
)

LIMIT_FIELDS = (
    "Low",
    "LowComp",
    "High",
    "HighComp",
    "Expected",
    "ExpectedComp",
)

# Comparator가 비교하는 top-level 스칼라 필드
COMPARED_FIELDS = (
    "Path",
    "ExecutionOrdinal",
    "Kind",
    "StepName",
    "Status",
    "Value",
    "Units",
    "Timestamp",
)

KEY_SEPARATOR = "|"
PATH_SEPARATOR = "/"

# =============================================================================
# Gap-filling (경로 보정)
# =============================================================================
# 명시적 노드 없이 깊이가 건너뛰어진 경우 채워 넣는 경로 세그먼트.
# 휴리스틱일 뿐, 원본 스키마 기준으로 검증된 조상 복원이 아님.

PLACEHOLDER_SEGMENT = "Unknown"
UNKNOWN_KIND = "Unknown"

# =============================================================================
# Embedded Annotation Contract (어노테이션 계약)
# =============================================================================
# 렌더링 결과물의 각 노드 조각에 data-parity-<key> 속성으로 삽입.
# 키는 소문자 고정, 시각 구조와 무관.

ANNOTATION_PREFIX = "data-parity-"

ANNOTATION_KEYS = (
    "path",
    "ordinal",
    "kind",
    "name",
    "status",
    "value",
    "units",
    "low",
    "lowcomp",
    "high",
    "highcomp",
    "expected",
    "expectedcomp",
    "timestamp",
)

REQUIRED_ANNOTATION_KEYS = ("path", "ordinal")

# =============================================================================
# Exit Codes (종료 코드)
# =============================================================================

EXIT_OK = 0
EXIT_VALIDATION_FAILURE = 1
EXIT_STRUCTURAL_FAILURE = 2

EXIT_PARITY_OK = 0
EXIT_PARITY_MISMATCH = 1
EXIT_USAGE_ERROR = 2

# =============================================================================
# Scenario / Output Filenames
# =============================================================================
# tests/golden/<scenario>/
# ├── source.xml
# └── expected/
#     └── canonical.json

SCENARIO_SOURCE_FILENAME = "source.xml"
SCENARIO_EXPECTED_DIR = "expected"
EXPECTED_CANONICAL_FILENAME = "canonical.json"

OUTPUT_REFERENCE_FILENAME = "reference.json"
OUTPUT_ARTIFACT_FILENAME = "report.html"
OUTPUT_SUBJECT_FILENAME = "subject.json"
OUTPUT_DIFF_FILENAME = "diff.json"

CONFIG_FILENAME = "default.yaml"
CONFIG_ENV_VAR = "PARITY_CONFIG"

RUN_ID_PREFIX = "RUN-"
