#!/usr/bin/env python3
"""
check_parity.py - 디렉터리 단위 parity 일괄 검사

각 *.xml 결과 문서에 대해:
1. 소스 추출 → reference.json
2. HTML 렌더링 → report.html (data-parity-* 어노테이션)
3. 어노테이션 추출 → subject.json
4. 비교 → diff.json

하나라도 실패하면 종료 코드 1, 입력 문제는 종료 코드 2.

사용법:
    # 기본 실행
    uv run python scripts/check_parity.py results/

    # 출력 위치 / 설정 파일 지정
    uv run python scripts/check_parity.py results/ --output-dir _parity --config custom.yaml

    # .env의 PARITY_CONFIG 사용
    echo "PARITY_CONFIG=custom.yaml" > .env
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.config import ConfigError, load_config  # noqa: E402
from src.core.ids import slugify_source_name  # noqa: E402
from src.core.logging import save_run_log  # noqa: E402
from src.domain.errors import ParityError  # noqa: E402
from src.parity.runner import ParityRunner  # noqa: E402

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """일괄 검사 결과."""
    scanned: int = 0
    passed: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        if self.errors:
            return 2
        return 0 if self.failed == 0 else 1

    def to_dict(self) -> dict:
        return {
            "scanned": self.scanned,
            "passed": self.passed,
            "failed": self.failed,
            "errors": self.errors,
        }


def check_directory(source_dir: Path, runner: ParityRunner) -> BatchResult:
    """source_dir 아래 모든 *.xml 검사."""
    result = BatchResult()

    for source_path in sorted(source_dir.rglob("*.xml")):
        result.scanned += 1
        try:
            relative = source_path.relative_to(source_dir).with_suffix("")
            run = runner.run_source(
                source_path,
                runner.output_dir / slugify_source_name(str(relative)),
            )
        except ParityError as e:
            result.errors.append(f"{source_path}: {e}")
            logger.error(f"{source_path}: {e}")
            continue

        if run.run_log is not None:
            save_run_log(run.run_log, run.output_dir / "logs")

        if run.passed:
            result.passed += 1
        else:
            result.failed += 1

    return result


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Batch source/embedded parity check")
    parser.add_argument("source_dir", type=Path, help="Directory containing result XML files")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("_parity"),
        help="Directory for per-document outputs (default: _parity)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration YAML")
    args = parser.parse_args()

    if not args.source_dir.is_dir():
        logger.error(f"Not a directory: {args.source_dir}")
        return 2

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Cannot load configuration: {e}")
        return 2
    runner = ParityRunner(output_dir=args.output_dir, config=config)

    logger.info("=" * 60)
    logger.info(f"Parity check: {args.source_dir}")
    logger.info("=" * 60)

    result = check_directory(args.source_dir, runner)

    logger.info("=" * 60)
    logger.info(
        f"Scanned: {result.scanned}, passed: {result.passed}, "
        f"failed: {result.failed}, errors: {len(result.errors)}"
    )
    logger.info("=" * 60)

    summary_path = args.output_dir / "summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    summary_path.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")

    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
