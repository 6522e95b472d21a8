"""
Domain layer: 정규 레코드 스키마, 상수, 에러 정의.
"""

from .errors import (
    EmptyInputError,
    ErrorCodes,
    InputNotFoundError,
    MalformedInputError,
    ParityError,
    StructuralEmptyError,
)
from .schemas import (
    CanonicalRecord,
    Comparator,
    GroupNode,
    LimitEntry,
    Limits,
    MeasurementNode,
    NodeKind,
    StepNode,
)

__all__ = [
    # errors
    "ParityError",
    "InputNotFoundError",
    "EmptyInputError",
    "MalformedInputError",
    "StructuralEmptyError",
    "ErrorCodes",
    # schemas
    "CanonicalRecord",
    "Limits",
    "NodeKind",
    "Comparator",
    "GroupNode",
    "StepNode",
    "MeasurementNode",
    "LimitEntry",
]
