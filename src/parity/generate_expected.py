#!/usr/bin/env python
"""
Pin golden reference arrays.

For every scenario directory under tests/golden (a source.xml, optionally an
expected/ folder), extract the reference array and write it to
expected/canonical.json. The golden tests then compare future extractions
and round trips against that file.

WARNING: Baselines are reviewed by a human before they are committed.
Refuses to run when a CI environment is detected.

Usage:
    python -m src.parity.generate_expected
    python -m src.parity.generate_expected scenario_001_basic --force
    python -m src.parity.generate_expected --list
"""

import argparse
import os
import sys
from pathlib import Path

from src.core.config import load_config
from src.domain.constants import EXPECTED_CANONICAL_FILENAME, SCENARIO_EXPECTED_DIR
from src.domain.errors import ParityError

from .runner import ParityRunner, ParityScenario, discover_scenarios

DEFAULT_GOLDEN_DIR = Path(__file__).parent.parent.parent / "tests" / "golden"

CI_INDICATORS = (
    "CI",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "JENKINS_URL",
    "CIRCLECI",
    "TRAVIS",
    "BUILDKITE",
    "TF_BUILD",  # Azure Pipelines
    "CODEBUILD_BUILD_ID",  # AWS CodeBuild
)


def detect_ci() -> str | None:
    """Name of the first CI indicator set in the environment, if any."""
    for indicator in CI_INDICATORS:
        if os.getenv(indicator):
            return indicator
    return None


def generate(
    scenarios: list[ParityScenario],
    runner: ParityRunner,
    force: bool = False,
) -> tuple[list[Path], list[str]]:
    """
    Write expected/canonical.json for each scenario.

    Existing baselines are kept unless force is set.

    Returns:
        (written paths, skipped or failed scenario names)
    """
    written: list[Path] = []
    skipped: list[str] = []

    for scenario in scenarios:
        expected_path = scenario.path / SCENARIO_EXPECTED_DIR / EXPECTED_CANONICAL_FILENAME
        if expected_path.exists() and not force:
            print(f"  ⚠ {scenario.name}: baseline exists (use --force)")
            skipped.append(scenario.name)
            continue

        try:
            written.append(runner.generate_expected(scenario))
        except ParityError as e:
            print(f"  ✗ {scenario.name}: {e}")
            skipped.append(scenario.name)
            continue
        print(f"  ✓ {scenario.name}")

    return written, skipped


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Pin golden reference arrays (expected/canonical.json)",
        epilog="WARNING: Review generated files before committing!",
    )
    parser.add_argument("scenarios", nargs="*", help="Scenario names (default: all)")
    parser.add_argument("--list", action="store_true", help="List scenarios and exit")
    parser.add_argument("--golden-dir", type=Path, default=DEFAULT_GOLDEN_DIR, help="Golden tests directory")
    parser.add_argument("--force", action="store_true", help="Overwrite existing baselines")
    args = parser.parse_args(argv)

    # --list is read-only, everything else is blocked in CI
    indicator = None if args.list else detect_ci()
    if indicator:
        print(
            f"ERROR: generate_expected cannot run in CI ({indicator}={os.getenv(indicator)}).\n"
            "Generate baselines locally, review them, then commit.",
            file=sys.stderr,
        )
        return 1

    scenarios = discover_scenarios(args.golden_dir)
    if not scenarios:
        print(f"No scenarios found in {args.golden_dir}")
        return 1

    if args.list:
        for s in scenarios:
            print(f"  {'✓' if s.expected is not None else '○'} {s.name}")
        return 0

    if args.scenarios:
        scenarios = [s for s in scenarios if s.name in args.scenarios]
        if not scenarios:
            print(f"No matching scenarios found for: {args.scenarios}")
            return 1

    runner = ParityRunner(output_dir=args.golden_dir / "_output", config=load_config())
    written, skipped = generate(scenarios, runner, force=args.force)

    print(f"\n{len(written)} baseline(s) written, {len(skipped)} skipped.")
    print("Review the generated files before committing.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
