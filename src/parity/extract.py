#!/usr/bin/env python
"""
Extract a canonical record array.

Reads a result document (or, with --embedded, a rendered artifact) and writes
the canonical array as UTF-8 JSON to stdout or --output.

Exit codes:
    0  success
    1  validation failure (not found / empty / malformed)
    2  structural failure (zero records)

Usage:
    python -m src.parity.extract results.xml
    python -m src.parity.extract results.xml -o reference.json
    python -m src.parity.extract report.html --embedded -o subject.json
"""

import argparse
import logging
import sys
from pathlib import Path

from src.core.artifacts import write_records
from src.core.config import ConfigError, load_config
from src.core.hashing import compute_records_digest
from src.core.logging import complete_run_log, create_run_log, save_run_log
from src.domain.constants import EXIT_OK, EXIT_VALIDATION_FAILURE
from src.domain.errors import ParityError

from .embedded_extract import EmbeddedExtractor
from .source_extract import SourceExtractor

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract a canonical record array",
    )
    parser.add_argument(
        "source",
        type=Path,
        help="Result document (or rendered artifact with --embedded)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output JSON path (default: stdout)",
    )
    parser.add_argument(
        "--embedded",
        action="store_true",
        help="Read data-parity-* annotations from a rendered artifact",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration YAML (default: default.yaml)",
    )
    parser.add_argument(
        "--run-log-dir",
        type=Path,
        default=None,
        help="Directory to save the run log JSON",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Cannot load configuration: {e}")
        return EXIT_VALIDATION_FAILURE

    run_log = create_run_log(str(args.source))

    if args.embedded:
        extractor = EmbeddedExtractor(config, run_log=run_log)
    else:
        extractor = SourceExtractor(config, run_log=run_log)

    exit_code = EXIT_OK
    try:
        records = extractor.extract_path(args.source)
    except ParityError as e:
        logger.error(f"Extraction failed: {e}")
        complete_run_log(run_log, success=False, error_code=e.code, error_context=e.context)
        exit_code = e.exit_code
    except OSError as e:
        logger.error(f"Cannot read input: {e}")
        complete_run_log(run_log, success=False, error_code="INPUT_READ_FAILED", error_context={"error": str(e)})
        exit_code = EXIT_VALIDATION_FAILURE

    if exit_code == EXIT_OK:
        try:
            write_records(records, args.output)
        except OSError as e:
            logger.error(f"Cannot write output: {e}")
            complete_run_log(run_log, success=False, error_code="OUTPUT_WRITE_FAILED", error_context={"error": str(e)})
            exit_code = EXIT_VALIDATION_FAILURE
        else:
            complete_run_log(
                run_log,
                success=True,
                record_count=len(records),
                records_digest=compute_records_digest(records),
            )

    if args.run_log_dir:
        log_path = save_run_log(run_log, args.run_log_dir)
        logger.info(f"Run log: {log_path}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
