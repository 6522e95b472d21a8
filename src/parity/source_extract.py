"""
Canonical extraction from the source result document.

Composes TreeFlattener → PathOrdinalResolver → RecordNormalizer directly over
the parsed hierarchy. The output is the reference ("golden") record array
that every other derivation is compared against.
"""

import logging
from pathlib import Path
from xml.etree.ElementTree import Element, ParseError

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from src.core.config import ParityConfig
from src.core.logging import emit_warning
from src.domain.errors import (
    EmptyInputError,
    ErrorCodes,
    InputNotFoundError,
    MalformedInputError,
    StructuralEmptyError,
)
from src.domain.schemas import (
    CanonicalRecord,
    FlatNode,
    MeasurementNode,
    ParityRunLog,
    StepNode,
)

from .flatten import TreeFlattener
from .normalize import RecordNormalizer
from .resolve import PathOrdinalResolver

logger = logging.getLogger(__name__)


class SourceExtractor:
    """
    Extract canonical records from an ATML result document.

    Usage:
        extractor = SourceExtractor()
        records = extractor.extract_path(Path("results.xml"))
    """

    def __init__(
        self,
        config: ParityConfig | None = None,
        flattener: TreeFlattener | None = None,
        run_log: ParityRunLog | None = None,
    ):
        """
        Args:
            config: Pipeline configuration (placeholder segment, timestamp formats)
            flattener: TreeFlattener instance
            run_log: Run log that collects passthrough warnings
        """
        self.config = config or ParityConfig()
        self.flattener = flattener or TreeFlattener()
        self.run_log = run_log
        self.normalizer = RecordNormalizer(self.config.timestamp_formats)

    def extract_path(self, source_path: Path) -> list[CanonicalRecord]:
        """
        Extract records from a file.

        Raises:
            InputNotFoundError: Path does not exist
            EmptyInputError: File is empty
            MalformedInputError: Not a result document
            StructuralEmptyError: No recognized nodes
        """
        if not source_path.exists() or not source_path.is_file():
            raise InputNotFoundError(ErrorCodes.INPUT_NOT_FOUND, path=str(source_path))

        content = source_path.read_bytes()
        return self.extract_text(content, source=str(source_path))

    def extract_text(self, content: str | bytes, source: str = "<string>") -> list[CanonicalRecord]:
        """Extract records from document text."""
        if not content.strip():
            raise EmptyInputError(ErrorCodes.EMPTY_INPUT, path=source)

        try:
            document = ET.fromstring(content)
        except (ParseError, DefusedXmlException) as e:
            raise MalformedInputError(
                ErrorCodes.MALFORMED_INPUT, path=source, cause=str(e)
            ) from e

        return self.extract_document(document, source=source)

    def extract_document(self, document: Element, source: str = "<document>") -> list[CanonicalRecord]:
        """Extract records from an already-parsed document element."""
        if not self.flattener.is_known_document(document):
            raise MalformedInputError(
                ErrorCodes.MALFORMED_INPUT,
                path=source,
                cause=f"unexpected document element {document.tag!r}",
            )

        nodes = self.flattener.flatten(document)
        if not nodes:
            raise StructuralEmptyError(ErrorCodes.STRUCTURAL_EMPTY, path=source)

        records = self.build_records(nodes)
        self._report_fallbacks(source)
        logger.info(f"Extracted {len(records)} records from {source}")
        return records

    def build_records(self, nodes: list[FlatNode]) -> list[CanonicalRecord]:
        """Resolve and normalize flat nodes in traversal order."""
        resolver = PathOrdinalResolver(self.config.placeholder_segment)
        return [self.build_record(node, resolver) for node in nodes]

    def build_record(self, node: FlatNode, resolver: PathOrdinalResolver) -> CanonicalRecord:
        identity = resolver.resolve(node.name, node.kind, node.depth, node.node_id)
        n = self.normalizer

        value = ""
        units = ""
        limits = n.limits()
        if isinstance(node, MeasurementNode):
            value = n.text(node.value)
            units = n.text(node.units)
            limits = n.limits(node.limit_candidates, node.expected)
        elif isinstance(node, StepNode):
            limits = n.limits(node.limit_candidates, node.expected)

        return CanonicalRecord(
            canonical_key=identity.canonical_key,
            execution_ordinal=identity.ordinal,
            path=identity.path,
            kind=node.kind.value,
            step_name=node.name,
            status=n.text(node.status),
            value=value,
            units=units,
            limits=limits,
            timestamp=n.timestamp(node.timestamp),
        )

    def _report_fallbacks(self, source: str) -> None:
        stats = self.normalizer.stats
        if stats.timestamp_fallback_count:
            emit_warning(
                self.run_log,
                code=ErrorCodes.TIMESTAMP_PARSE_FALLBACK,
                action_id="normalize_timestamp",
                field_or_slot="Timestamp",
                message=f"{stats.timestamp_fallback_count} timestamp(s) kept verbatim in {source}",
            )
        if stats.unknown_comparator_count:
            emit_warning(
                self.run_log,
                code=ErrorCodes.UNKNOWN_COMPARATOR_TOKEN,
                action_id="normalize_comparator",
                field_or_slot="Limits",
                message=f"{stats.unknown_comparator_count} comparator token(s) kept verbatim in {source}",
            )
        self.normalizer.reset_stats()


def extract_source(
    source_path: Path,
    config: ParityConfig | None = None,
) -> list[CanonicalRecord]:
    """
    Convenience function to extract the reference array.

    Args:
        source_path: Path to the result document
        config: Optional configuration

    Returns:
        Canonical records in traversal order
    """
    extractor = SourceExtractor(config=config)
    return extractor.extract_path(source_path)
