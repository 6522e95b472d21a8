"""
Parity runner.

Runs the full round trip for a source document:

    source ─► SourceExtractor ─► reference array (A)
    source ─► SourceExtractor ─► HtmlReportRenderer ─► artifact
    artifact ─► EmbeddedExtractor ─► subject array (B)
    (A, B) ─► compare_records ─► report

Golden scenarios additionally pin A against a reviewed expected array.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.core.artifacts import atomic_write_json, atomic_write_text, dumps_records, load_records
from src.core.config import ParityConfig
from src.core.hashing import compute_records_digest
from src.core.ids import slugify_source_name
from src.core.logging import complete_run_log, create_run_log
from src.domain.constants import (
    EXPECTED_CANONICAL_FILENAME,
    OUTPUT_ARTIFACT_FILENAME,
    OUTPUT_DIFF_FILENAME,
    OUTPUT_REFERENCE_FILENAME,
    OUTPUT_SUBJECT_FILENAME,
    SCENARIO_EXPECTED_DIR,
    SCENARIO_SOURCE_FILENAME,
)
from src.domain.errors import ParityError
from src.domain.schemas import CanonicalRecord, ParityRunLog
from src.render.html import HtmlReportRenderer

from .compare import (
    ComparisonReport,
    assert_parity,
    compare_records,
    format_diff_report,
    record_report_warnings,
)
from .embedded_extract import EmbeddedExtractor
from .source_extract import SourceExtractor

logger = logging.getLogger(__name__)


@dataclass
class ParityScenario:
    """A golden parity scenario."""
    name: str
    path: Path
    source_path: Path
    expected: list[CanonicalRecord] | None = None

    @classmethod
    def load(cls, scenario_path: Path) -> "ParityScenario":
        """
        Load a scenario from a directory.

        Expected structure:
            scenario_path/
                source.xml
                expected/ (optional)
                    canonical.json
        """
        source_path = scenario_path / SCENARIO_SOURCE_FILENAME
        if not source_path.exists():
            raise FileNotFoundError(f"Missing {SCENARIO_SOURCE_FILENAME} in {scenario_path}")

        expected = None
        expected_path = scenario_path / SCENARIO_EXPECTED_DIR / EXPECTED_CANONICAL_FILENAME
        if expected_path.exists():
            expected = load_records(expected_path)

        return cls(
            name=scenario_path.name,
            path=scenario_path,
            source_path=source_path,
            expected=expected,
        )


@dataclass
class ParityRunResult:
    """Artifacts and verdict of one round trip."""
    source_path: Path
    output_dir: Path
    reference: list[CanonicalRecord] = field(default_factory=list)
    subject: list[CanonicalRecord] = field(default_factory=list)
    report: ComparisonReport = field(default_factory=ComparisonReport)
    run_log: ParityRunLog | None = None

    @property
    def passed(self) -> bool:
        return self.report.passed

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": str(self.source_path),
            "output_dir": str(self.output_dir),
            "summary": self.report.summary(),
            "run_log": self.run_log.to_dict() if self.run_log else None,
        }


class ParityRunner:
    """
    Run source/embedded parity checks.

    Usage:
        runner = ParityRunner(output_dir)
        result = runner.run_source(Path("results.xml"))
        runner.run_scenario(scenario)
    """

    def __init__(
        self,
        output_dir: Path,
        config: ParityConfig | None = None,
        renderer: HtmlReportRenderer | None = None,
    ):
        """
        Args:
            output_dir: Directory for reference/artifact/subject/diff outputs
            config: Pipeline configuration
            renderer: Renderer producing the annotated artifact
        """
        self.output_dir = output_dir
        self.config = config or ParityConfig()
        self.renderer = renderer or HtmlReportRenderer(
            annotation_prefix=self.config.annotation_prefix,
        )

    def run_source(self, source_path: Path, output_dir: Path | None = None) -> ParityRunResult:
        """
        Run the round trip for one source document.

        Raises:
            ParityError: Source or artifact extraction failed
        """
        output_dir = output_dir or self.output_dir / slugify_source_name(source_path.stem)
        output_dir.mkdir(parents=True, exist_ok=True)

        run_log = create_run_log(str(source_path))
        result = ParityRunResult(source_path=source_path, output_dir=output_dir, run_log=run_log)

        try:
            reference = SourceExtractor(self.config, run_log=run_log).extract_path(source_path)
            atomic_write_text(output_dir / OUTPUT_REFERENCE_FILENAME, dumps_records(reference))

            artifact_path = self.renderer.render(reference, output_dir / OUTPUT_ARTIFACT_FILENAME)

            subject = EmbeddedExtractor(self.config, run_log=run_log).extract_path(artifact_path)
            atomic_write_text(output_dir / OUTPUT_SUBJECT_FILENAME, dumps_records(subject))
        except ParityError as e:
            complete_run_log(run_log, success=False, error_code=e.code, error_context=e.context)
            raise

        report = compare_records(
            reference,
            subject,
            fail_on_duplicate_keys=self.config.fail_on_duplicate_keys,
        )
        record_report_warnings(report, run_log)
        atomic_write_json(output_dir / OUTPUT_DIFF_FILENAME, report.to_dict())

        complete_run_log(
            run_log,
            success=report.passed,
            record_count=len(reference),
            records_digest=compute_records_digest(reference),
        )

        if report.passed:
            logger.info(f"Parity OK: {source_path} ({len(reference)} records)")
        else:
            logger.warning(f"Parity FAIL: {source_path}\n{format_diff_report(report, self.config.max_diffs)}")

        result.reference = reference
        result.subject = subject
        result.report = report
        return result

    def run_scenario(self, scenario: ParityScenario, assert_match: bool = True) -> ParityRunResult:
        """
        Run a golden scenario.

        Args:
            scenario: The scenario to run
            assert_match: Raise AssertionError when parity or the golden check fails

        Returns:
            ParityRunResult
        """
        result = self.run_source(scenario.source_path, self.output_dir / scenario.name)

        if assert_match:
            if not result.passed:
                raise AssertionError(
                    f"Round-trip parity failed for {scenario.name}:\n"
                    f"{format_diff_report(result.report, self.config.max_diffs)}"
                )
            if scenario.expected is not None:
                assert_parity(scenario.expected, result.reference)

        return result

    def generate_expected(self, scenario: ParityScenario) -> Path:
        """
        Write expected/canonical.json for a scenario.

        WARNING: Only for initializing golden files; review before committing.
        """
        reference = SourceExtractor(self.config).extract_path(scenario.source_path)

        expected_dir = scenario.path / SCENARIO_EXPECTED_DIR
        expected_path = expected_dir / EXPECTED_CANONICAL_FILENAME
        atomic_write_text(expected_path, dumps_records(reference))
        return expected_path


def discover_scenarios(golden_dir: Path) -> list[ParityScenario]:
    """
    Discover all parity scenarios in a directory.

    Args:
        golden_dir: Path to golden tests directory

    Returns:
        List of ParityScenario objects, sorted by name
    """
    scenarios = []

    for scenario_path in golden_dir.iterdir():
        if scenario_path.is_dir() and (scenario_path / SCENARIO_SOURCE_FILENAME).exists():
            try:
                scenarios.append(ParityScenario.load(scenario_path))
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load scenario {scenario_path}: {e}")

    return sorted(scenarios, key=lambda s: s.name)
