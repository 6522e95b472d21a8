"""
Parity comparison of two canonical record arrays.

Records are matched by CanonicalKey, never by position:
- Dropped:      key in reference, absent from subject
- Hallucinated: key in subject, absent from reference
- Corrupted:    key in both, at least one field differs

Field equality is "string-first, numeric fallback" so that renderers may
reformat numbers ("1" vs "1.00") or change case without breaking parity,
while "1" vs "1.0a" still fails.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from src.core.logging import emit_warning
from src.domain.constants import COMPARED_FIELDS, LIMIT_FIELDS
from src.domain.errors import ErrorCodes
from src.domain.schemas import CanonicalRecord, ParityRunLog

# Plain decimal / exponent notation only: no locale separators, no nan/inf,
# no underscores.
_NUMERIC_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_number(text: str) -> Decimal | None:
    if not _NUMERIC_PATTERN.fullmatch(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def values_equal(expected: Any, actual: Any) -> bool:
    """
    Tolerant field equality.

    Examples:
        values_equal("1", "1.00")        → True
        values_equal("1", "1.0a")        → False
        values_equal("Passed", "passed") → True
        values_equal("", None)           → True
    """
    left = _as_text(expected)
    right = _as_text(actual)

    if left == right:
        return True
    if left.lower() == right.lower():
        return True

    left_num = _as_number(left)
    right_num = _as_number(right)
    if left_num is not None and right_num is not None:
        return left_num == right_num
    return False


@dataclass
class FieldDiff:
    """One mismatching field of a matched key."""
    field: str
    expected: Any
    actual: Any

    def __str__(self) -> str:
        return f"{self.field}: expected {self.expected!r}, actual {self.actual!r}"

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "expected": self.expected, "actual": self.actual}


@dataclass
class CorruptedRecord:
    """A key present on both sides whose fields disagree."""
    canonical_key: str
    diffs: list[FieldDiff] = field(default_factory=list)

    def __str__(self) -> str:
        details = "\n".join(f"    {d}" for d in self.diffs)
        return f"CORRUPTED '{self.canonical_key}'\n{details}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "CanonicalKey": self.canonical_key,
            "diffs": [d.to_dict() for d in self.diffs],
        }


@dataclass
class ComparisonReport:
    """Outcome of comparing a reference array with a subject array."""
    reference_count: int = 0
    subject_count: int = 0
    matched_count: int = 0
    dropped: list[CanonicalRecord] = field(default_factory=list)
    hallucinated: list[CanonicalRecord] = field(default_factory=list)
    corrupted: list[CorruptedRecord] = field(default_factory=list)
    duplicate_reference_keys: list[str] = field(default_factory=list)
    duplicate_subject_keys: list[str] = field(default_factory=list)
    fail_on_duplicate_keys: bool = True

    @property
    def has_duplicates(self) -> bool:
        return bool(self.duplicate_reference_keys or self.duplicate_subject_keys)

    @property
    def passed(self) -> bool:
        """Parity holds: nothing dropped, hallucinated or corrupted."""
        if self.dropped or self.hallucinated or self.corrupted:
            return False
        if self.fail_on_duplicate_keys and self.has_duplicates:
            return False
        return True

    def summary(self) -> dict[str, Any]:
        return {
            "reference": self.reference_count,
            "subject": self.subject_count,
            "matched": self.matched_count,
            "dropped": len(self.dropped),
            "hallucinated": len(self.hallucinated),
            "corrupted": len(self.corrupted),
            "duplicate_keys": len(self.duplicate_reference_keys) + len(self.duplicate_subject_keys),
            "passed": self.passed,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": self.summary(),
            "dropped": [r.to_dict() for r in self.dropped],
            "hallucinated": [r.to_dict() for r in self.hallucinated],
            "corrupted": [c.to_dict() for c in self.corrupted],
            "duplicate_keys": {
                "reference": self.duplicate_reference_keys,
                "subject": self.duplicate_subject_keys,
            },
        }


def compare_fields(expected: CanonicalRecord, actual: CanonicalRecord) -> list[FieldDiff]:
    """
    Compare the fixed field set of two records with the same key.

    Args:
        expected: Reference record
        actual: Subject record

    Returns:
        List of FieldDiff (empty if every field matches)
    """
    diffs: list[FieldDiff] = []
    expected_dict = expected.to_dict()
    actual_dict = actual.to_dict()

    for name in COMPARED_FIELDS:
        if not values_equal(expected_dict[name], actual_dict[name]):
            diffs.append(FieldDiff(name, expected_dict[name], actual_dict[name]))

    expected_limits = expected_dict["Limits"]
    actual_limits = actual_dict["Limits"]
    for name in LIMIT_FIELDS:
        if not values_equal(expected_limits[name], actual_limits[name]):
            diffs.append(FieldDiff(f"Limits.{name}", expected_limits[name], actual_limits[name]))

    return diffs


def _key_map(records: list[CanonicalRecord]) -> tuple[dict[str, CanonicalRecord], list[str]]:
    """Key → record (later entry wins) plus the keys seen more than once."""
    mapping: dict[str, CanonicalRecord] = {}
    duplicates: list[str] = []
    for record in records:
        key = record.canonical_key
        if key in mapping and key not in duplicates:
            duplicates.append(key)
        mapping[key] = record
    return mapping, duplicates


def compare_records(
    reference: list[CanonicalRecord],
    subject: list[CanonicalRecord],
    fail_on_duplicate_keys: bool = True,
) -> ComparisonReport:
    """
    Compare a reference array with a subject array.

    Args:
        reference: Golden records (source derivation)
        subject: Records under test (embedded derivation)
        fail_on_duplicate_keys: Treat duplicate keys on either side as failure

    Returns:
        ComparisonReport
    """
    reference_map, reference_dups = _key_map(reference)
    subject_map, subject_dups = _key_map(subject)

    report = ComparisonReport(
        reference_count=len(reference),
        subject_count=len(subject),
        duplicate_reference_keys=reference_dups,
        duplicate_subject_keys=subject_dups,
        fail_on_duplicate_keys=fail_on_duplicate_keys,
    )

    remaining = dict(subject_map)
    for key, expected in reference_map.items():
        actual = remaining.pop(key, None)
        if actual is None:
            report.dropped.append(expected)
            continue

        diffs = compare_fields(expected, actual)
        if diffs:
            report.corrupted.append(CorruptedRecord(key, diffs))
        else:
            report.matched_count += 1

    report.hallucinated.extend(remaining.values())
    return report


def format_diff_report(report: ComparisonReport, max_diffs: int = 20) -> str:
    """
    Format a comparison report into a human-readable summary.

    Args:
        report: ComparisonReport
        max_diffs: Maximum number of entries to show per category

    Returns:
        Formatted report string
    """
    summary = report.summary()
    verdict = "PASS" if report.passed else "FAIL"
    lines = [
        f"Parity {verdict}: reference={summary['reference']} subject={summary['subject']} "
        f"matched={summary['matched']} dropped={summary['dropped']} "
        f"hallucinated={summary['hallucinated']} corrupted={summary['corrupted']}",
    ]

    sections: list[tuple[str, list[str]]] = [
        ("Dropped", [f"DROPPED '{r.canonical_key}'" for r in report.dropped]),
        ("Hallucinated", [f"HALLUCINATED '{r.canonical_key}'" for r in report.hallucinated]),
        ("Corrupted", [str(c) for c in report.corrupted]),
        (
            "Duplicate keys",
            [f"DUPLICATE (reference) '{k}'" for k in report.duplicate_reference_keys]
            + [f"DUPLICATE (subject) '{k}'" for k in report.duplicate_subject_keys],
        ),
    ]

    for title, entries in sections:
        if not entries:
            continue
        lines.append("-" * 60)
        lines.append(f"{title} ({len(entries)}):")
        for entry in entries[:max_diffs]:
            lines.append(f"  {entry}")
        if len(entries) > max_diffs:
            lines.append(f"  ... and {len(entries) - max_diffs} more")

    return "\n".join(lines)


def assert_parity(
    reference: list[CanonicalRecord],
    subject: list[CanonicalRecord],
) -> ComparisonReport:
    """
    Assert that subject matches reference, with detailed diff on failure.

    Raises:
        AssertionError: With formatted report if parity does not hold
    """
    report = compare_records(reference, subject)
    if not report.passed:
        raise AssertionError(f"Parity comparison failed:\n{format_diff_report(report)}")
    return report


def record_report_warnings(report: ComparisonReport, run_log: ParityRunLog | None) -> None:
    """Duplicate keys and field mismatches → run log warnings."""
    for side, keys in (
        ("reference", report.duplicate_reference_keys),
        ("subject", report.duplicate_subject_keys),
    ):
        for key in keys:
            emit_warning(
                run_log,
                code=ErrorCodes.DUPLICATE_KEY,
                action_id=key,
                field_or_slot="CanonicalKey",
                message=f"Key appears more than once in {side}; last record wins",
            )

    for corrupted in report.corrupted:
        for diff in corrupted.diffs:
            emit_warning(
                run_log,
                code=ErrorCodes.FIELD_MISMATCH,
                action_id=corrupted.canonical_key,
                field_or_slot=diff.field,
                message="Field differs between reference and subject",
                original_value=_as_text(diff.expected),
                resolved_value=_as_text(diff.actual),
            )
