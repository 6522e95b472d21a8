#!/usr/bin/env python
"""
Compare two canonical record arrays.

Exit codes:
    0  parity holds
    1  mismatch detected
    2  usage / IO error

Usage:
    python -m src.parity.check reference.json subject.json
    python -m src.parity.check reference.json subject.json -o diff.json
    python -m src.parity.check reference.json subject.json -o diff.xlsx
"""

import argparse
import logging
import sys
from pathlib import Path

from src.core.artifacts import atomic_write_json, load_records
from src.core.config import ConfigError, load_config
from src.domain.constants import EXIT_PARITY_MISMATCH, EXIT_PARITY_OK, EXIT_USAGE_ERROR
from src.render.excel import write_diff_workbook

from .compare import ComparisonReport, compare_records, format_diff_report

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare a reference canonical array with a subject array",
    )
    parser.add_argument("reference", type=Path, help="Reference (golden) canonical JSON")
    parser.add_argument("subject", type=Path, help="Subject canonical JSON")
    parser.add_argument(
        "-o",
        "--diff-output",
        type=Path,
        default=None,
        help="Write the diff report (.json, or .xlsx for a workbook)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration YAML (default: default.yaml)",
    )
    return parser


def save_report(report: ComparisonReport, output_path: Path) -> Path:
    """Persist the report; the suffix picks JSON or XLSX."""
    if output_path.suffix.lower() == ".xlsx":
        return write_diff_workbook(report, output_path)
    atomic_write_json(output_path, report.to_dict())
    return output_path


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Cannot load configuration: {e}")
        return EXIT_USAGE_ERROR

    try:
        reference = load_records(args.reference)
        subject = load_records(args.subject)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot load canonical arrays: {e}")
        return EXIT_USAGE_ERROR

    report = compare_records(
        reference,
        subject,
        fail_on_duplicate_keys=config.fail_on_duplicate_keys,
    )
    print(format_diff_report(report, config.max_diffs))

    if args.diff_output:
        try:
            saved = save_report(report, args.diff_output)
        except OSError as e:
            logger.error(f"Cannot write diff report: {e}")
            return EXIT_USAGE_ERROR
        logger.info(f"Diff report: {saved}")

    return EXIT_PARITY_OK if report.passed else EXIT_PARITY_MISMATCH


if __name__ == "__main__":
    sys.exit(main())
