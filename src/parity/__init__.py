"""
Parity utilities for canonical result extraction and comparison.

Two independent derivations of the same canonical record array:
- SourceExtractor walks the original result hierarchy (reference)
- EmbeddedExtractor reads data-parity-* annotations from a rendered artifact

compare_records proves they agree.

Philosophy:
- Identity is Path + ordinal, never array position
- Compare MEANING, not formatting ("1" == "1.00", "Passed" == "passed")
- Characterize divergence (dropped / hallucinated / corrupted), not just detect it
"""

from .compare import (
    ComparisonReport,
    assert_parity,
    compare_records,
    format_diff_report,
    record_report_warnings,
    values_equal,
)
from .embedded_extract import EmbeddedExtractor, extract_embedded
from .flatten import TreeFlattener, format_root_name
from .normalize import NormalizationStats, RecordNormalizer
from .resolve import PathOrdinalResolver, ResolvedIdentity
from .source_extract import SourceExtractor, extract_source
from .runner import ParityRunner, ParityScenario, discover_scenarios

__all__ = [
    # Extraction
    "TreeFlattener",
    "format_root_name",
    "RecordNormalizer",
    "NormalizationStats",
    "PathOrdinalResolver",
    "ResolvedIdentity",
    "SourceExtractor",
    "EmbeddedExtractor",
    "extract_source",
    "extract_embedded",
    # Comparison
    "ComparisonReport",
    "compare_records",
    "values_equal",
    "format_diff_report",
    "assert_parity",
    "record_report_warnings",
    # Runner
    "ParityRunner",
    "ParityScenario",
    "discover_scenarios",
]
