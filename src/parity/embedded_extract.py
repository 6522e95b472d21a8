"""
Canonical extraction from a rendered artifact's embedded annotations.

Never looks at the source hierarchy or at the artifact's visual structure.
Any element carrying data-parity-* attributes is one fragment; the fragment's
attributes alone determine the record. As long as whatever produced the
artifact honors the annotation contract, this extractor stays correct under
any change of markup, nesting or styling.

Annotation contract (one lowercase key per field):
    path, ordinal, kind, name, status, value, units,
    low, lowcomp, high, highcomp, expected, expectedcomp, timestamp
"""

import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser
from pathlib import Path

from src.core.config import ParityConfig
from src.core.logging import emit_warning
from src.domain.constants import (
    ANNOTATION_KEYS,
    REQUIRED_ANNOTATION_KEYS,
    UNKNOWN_KIND,
)
from src.domain.errors import (
    EmptyInputError,
    ErrorCodes,
    InputNotFoundError,
    MalformedInputError,
    StructuralEmptyError,
)
from src.domain.schemas import CanonicalRecord, ParityRunLog

from .normalize import RecordNormalizer

logger = logging.getLogger(__name__)


@dataclass
class AnnotatedFragment:
    """One annotated element: its position and decoded annotations."""
    index: int
    tag: str
    line: int
    annotations: dict[str, str] = field(default_factory=dict)


class AnnotationScanner(HTMLParser):
    """
    Collect data-parity-* attributes from every element, in document order.

    Attribute values come back entity-decoded from HTMLParser.
    """

    def __init__(self, prefix: str):
        super().__init__(convert_charrefs=True)
        self.prefix = prefix.lower()
        self.fragments: list[AnnotatedFragment] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._collect(tag, attrs)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._collect(tag, attrs)

    def _collect(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        annotations: dict[str, str] = {}
        for name, value in attrs:
            if not name.startswith(self.prefix):
                continue
            key = name[len(self.prefix):]
            # First occurrence wins on repeated attributes
            annotations.setdefault(key, value if value is not None else "")

        if not annotations:
            return

        line, _ = self.getpos()
        self.fragments.append(AnnotatedFragment(
            index=len(self.fragments),
            tag=tag,
            line=line,
            annotations=annotations,
        ))


class EmbeddedExtractor:
    """
    Extract canonical records from annotated markup.

    Usage:
        extractor = EmbeddedExtractor()
        records = extractor.extract_path(Path("report.html"))
    """

    def __init__(
        self,
        config: ParityConfig | None = None,
        run_log: ParityRunLog | None = None,
    ):
        """
        Args:
            config: Pipeline configuration (annotation prefix)
            run_log: Run log that collects skipped-fragment warnings
        """
        self.config = config or ParityConfig()
        self.run_log = run_log
        self.normalizer = RecordNormalizer(self.config.timestamp_formats)
        self.skipped: list[AnnotatedFragment] = []

    def extract_path(self, artifact_path: Path) -> list[CanonicalRecord]:
        """
        Extract records from a rendered artifact file.

        Raises:
            InputNotFoundError: Path does not exist
            EmptyInputError: File is empty
            MalformedInputError: File is not UTF-8 text
            StructuralEmptyError: No usable annotated fragment
        """
        if not artifact_path.exists() or not artifact_path.is_file():
            raise InputNotFoundError(ErrorCodes.INPUT_NOT_FOUND, path=str(artifact_path))

        try:
            content = artifact_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInputError(
                ErrorCodes.MALFORMED_INPUT, path=str(artifact_path), cause=str(e)
            ) from e

        return self.extract_text(content, source=str(artifact_path))

    def extract_text(self, content: str, source: str = "<string>") -> list[CanonicalRecord]:
        """Extract records from markup text."""
        if not content.strip():
            raise EmptyInputError(ErrorCodes.EMPTY_INPUT, path=source)

        fragments = self.scan(content)
        records: list[CanonicalRecord] = []
        self.skipped = []
        for fragment in fragments:
            record = self.build_record(fragment)
            if record is None:
                self.skipped.append(fragment)
                continue
            records.append(record)

        if not records:
            raise StructuralEmptyError(
                ErrorCodes.STRUCTURAL_EMPTY,
                path=source,
                fragments=len(fragments),
                skipped=len(self.skipped),
            )

        logger.info(
            f"Extracted {len(records)} records from {source} "
            f"({len(self.skipped)} fragment(s) skipped)"
        )
        return records

    def scan(self, content: str) -> list[AnnotatedFragment]:
        """Find all annotated fragments in document order."""
        scanner = AnnotationScanner(self.config.annotation_prefix)
        scanner.feed(content)
        scanner.close()
        return scanner.fragments

    def build_record(self, fragment: AnnotatedFragment) -> CanonicalRecord | None:
        """
        Decode one fragment.

        Returns None (after a warning) when an identity annotation is missing
        or the ordinal is not a positive integer.
        """
        ann = fragment.annotations
        action_id = f"fragment_{fragment.index}@line{fragment.line}"

        for key in REQUIRED_ANNOTATION_KEYS:
            if key not in ann:
                emit_warning(
                    self.run_log,
                    code=ErrorCodes.ANNOTATION_MISSING,
                    action_id=action_id,
                    field_or_slot=key,
                    message=f"<{fragment.tag}> has no {self.config.annotation_prefix}{key}; fragment skipped",
                )
                return None

        raw_ordinal = ann["ordinal"].strip()
        try:
            ordinal = int(raw_ordinal)
        except ValueError:
            ordinal = 0
        if ordinal < 1:
            emit_warning(
                self.run_log,
                code=ErrorCodes.ANNOTATION_INVALID,
                action_id=action_id,
                field_or_slot="ordinal",
                message="ordinal is not a positive integer; fragment skipped",
                original_value=ann["ordinal"],
            )
            return None

        unknown = sorted(set(ann) - set(ANNOTATION_KEYS))
        if unknown:
            logger.debug(f"{action_id}: ignoring annotations {unknown}")

        n = self.normalizer
        path = ann["path"]
        return CanonicalRecord(
            canonical_key=CanonicalRecord.make_key(path, ordinal),
            execution_ordinal=ordinal,
            path=path,
            kind=ann.get("kind") or UNKNOWN_KIND,
            step_name=ann.get("name", ""),
            status=n.text(ann.get("status")),
            value=n.text(ann.get("value")),
            units=n.text(ann.get("units")),
            limits=n.limits_from_values(
                low=ann.get("low", ""),
                low_comp=ann.get("lowcomp"),
                high=ann.get("high", ""),
                high_comp=ann.get("highcomp"),
                expected=ann.get("expected", ""),
                expected_comp=ann.get("expectedcomp"),
            ),
            timestamp=n.timestamp(ann.get("timestamp")),
        )


def extract_embedded(
    artifact_path: Path,
    config: ParityConfig | None = None,
) -> list[CanonicalRecord]:
    """
    Convenience function to extract the subject array from an artifact.

    Args:
        artifact_path: Path to the rendered artifact
        config: Optional configuration

    Returns:
        Canonical records in fragment order
    """
    extractor = EmbeddedExtractor(config=config)
    return extractor.extract_path(artifact_path)
