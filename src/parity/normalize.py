"""
Record normalizer for canonical extraction.

Converts raw per-node fields into their canonical string/enum forms:
- Status / Value / Units → verbatim, never None
- Timestamps → "HH:MM:SS - DDMONYYYY"
- Comparator aliases → GE/GT/LE/LT/EQ/NE (NONE when absent)
- Limit candidates → Limits (pair XOR expected)

Nothing here raises on bad input. Unparseable timestamps and unknown
comparator tokens pass through unchanged and are counted, so a caller can
tell how much of a document fell back.
"""

import html
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.domain.schemas import Comparator, LimitEntry, Limits

logger = logging.getLogger(__name__)

# Fixed English abbreviations; strftime("%b") would follow the process locale.
_MONTHS = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)

_COMPARATOR_ALIASES: dict[str, Comparator] = {}
for _comp, _aliases in {
    Comparator.GE: ("GE", ">=", "=>", "≥", "GTE", "GREATERTHANOREQUAL", "GREATEROREQUAL"),
    Comparator.GT: ("GT", ">", "GREATERTHAN", "GREATER"),
    Comparator.LE: ("LE", "<=", "=<", "≤", "LTE", "LESSTHANOREQUAL", "LESSOREQUAL"),
    Comparator.LT: ("LT", "<", "LESSTHAN", "LESS"),
    Comparator.EQ: ("EQ", "=", "==", "EQUAL", "EQUALS"),
    Comparator.NE: ("NE", "!=", "<>", "≠", "NOTEQUAL"),
    Comparator.NONE: ("NONE",),
}.items():
    for _alias in _aliases:
        _COMPARATOR_ALIASES[_alias] = _comp

CANONICAL_TIMESTAMP_PATTERN = re.compile(
    r"\d{2}:\d{2}:\d{2} - \d{2}(?:" + "|".join(_MONTHS) + r")\d{4}"
)

GREATER_FAMILY = frozenset({Comparator.GE.value, Comparator.GT.value})
LESSER_FAMILY = frozenset({Comparator.LE.value, Comparator.LT.value})


@dataclass
class NormalizationStats:
    """Counts of values that fell back to raw passthrough."""
    timestamp_fallback_count: int = 0
    unknown_comparator_count: int = 0

    def total(self) -> int:
        """Total fallback count."""
        return self.timestamp_fallback_count + self.unknown_comparator_count

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "TIMESTAMP_PARSE_FALLBACK": self.timestamp_fallback_count,
            "UNKNOWN_COMPARATOR_TOKEN": self.unknown_comparator_count,
            "total": self.total(),
        }


class RecordNormalizer:
    """
    Normalize raw node fields into canonical record values.

    Usage:
        normalizer = RecordNormalizer()
        ts = normalizer.timestamp("2024-01-15T09:30:00")   # "09:30:00 - 15JAN2024"
        comp = normalizer.comparator("&gt;=")               # "GE"
        limits = normalizer.limits(node.limit_candidates, node.expected)
    """

    def __init__(self, timestamp_formats: tuple[str, ...] | None = None):
        """
        Args:
            timestamp_formats: strptime formats tried after ISO 8601 parsing fails
        """
        self.timestamp_formats = tuple(timestamp_formats or ())
        self._stats = NormalizationStats()

    @property
    def stats(self) -> NormalizationStats:
        """Get current fallback statistics."""
        return self._stats

    def reset_stats(self) -> None:
        """Reset fallback counters."""
        self._stats = NormalizationStats()

    # -------------------------------------------------------------------------
    # Scalars
    # -------------------------------------------------------------------------

    @staticmethod
    def text(value: Any) -> str:
        """Pass a status/value/units field through verbatim; None becomes ""."""
        if value is None:
            return ""
        return str(value)

    def timestamp(self, raw: str | None) -> str:
        """
        Render a date-time as "HH:MM:SS - DDMONYYYY".

        The wall-clock time of the source is kept; offsets are not converted.
        Unparseable input is returned unchanged.
        """
        if raw is None:
            return ""

        text = str(raw).strip()
        if not text:
            return ""

        # Already canonical (embedded annotations)
        if CANONICAL_TIMESTAMP_PATTERN.fullmatch(text):
            return text

        parsed = self._parse_datetime(text)
        if parsed is None:
            self._stats.timestamp_fallback_count += 1
            logger.debug(f"Timestamp passthrough: {raw!r}")
            return str(raw)

        return (
            f"{parsed.hour:02d}:{parsed.minute:02d}:{parsed.second:02d} - "
            f"{parsed.day:02d}{_MONTHS[parsed.month - 1]}{parsed.year:04d}"
        )

    def _parse_datetime(self, text: str) -> datetime | None:
        iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
        try:
            return datetime.fromisoformat(iso)
        except ValueError:
            pass

        for fmt in self.timestamp_formats:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        return None

    def comparator(self, raw: str | None) -> str:
        """
        Map a comparator alias onto GE/GT/LE/LT/EQ/NE.

        Case-insensitive; accepts symbolic ("<=") and entity ("&lt;=") forms.
        Absent or blank input yields "NONE"; unknown tokens pass through.
        """
        if raw is None:
            return Comparator.NONE.value

        token = html.unescape(str(raw)).strip()
        if not token:
            return Comparator.NONE.value

        lookup = re.sub(r"[\s_\-]+", "", token).upper()
        match = _COMPARATOR_ALIASES.get(lookup)
        if match is None:
            self._stats.unknown_comparator_count += 1
            logger.debug(f"Comparator passthrough: {raw!r}")
            return str(raw)
        return match.value

    # -------------------------------------------------------------------------
    # Limits
    # -------------------------------------------------------------------------

    def limits(
        self,
        candidates: tuple[LimitEntry, ...] | list[LimitEntry] = (),
        expected: LimitEntry | None = None,
    ) -> Limits:
        """
        Build Limits from raw candidates.

        Low is the first candidate in the greater family (GE/GT), High the
        first in the lesser family (LE/LT). Expected is only used when no
        bound was found, so a record never carries both.
        """
        low: str | None = None
        low_comp = Comparator.NONE.value
        high: str | None = None
        high_comp = Comparator.NONE.value
        found_low = False
        found_high = False

        for entry in candidates:
            comp = self.comparator(entry.comparator)
            if not found_low and comp in GREATER_FAMILY:
                low, low_comp, found_low = entry.value, comp, True
            elif not found_high and comp in LESSER_FAMILY:
                high, high_comp, found_high = entry.value, comp, True

        if found_low or found_high:
            return Limits(low=low, low_comp=low_comp, high=high, high_comp=high_comp)

        if expected is not None:
            return Limits(
                expected=expected.value,
                expected_comp=self.comparator(expected.comparator),
            )

        return Limits()

    def limits_from_values(
        self,
        low: str | None = None,
        low_comp: str | None = None,
        high: str | None = None,
        high_comp: str | None = None,
        expected: str | None = None,
        expected_comp: str | None = None,
    ) -> Limits:
        """Normalize already-separated limit fields (embedded annotations)."""
        return Limits(
            low=low,
            low_comp=self.comparator(low_comp),
            high=high,
            high_comp=self.comparator(high_comp),
            expected=expected,
            expected_comp=self.comparator(expected_comp),
        )
