"""
설정 로드: default.yaml → ParityConfig

우선순위:
1. 명시적 config_path 인자
2. PARITY_CONFIG 환경변수
3. 프로젝트 루트의 default.yaml
파일이 없으면 내장 기본값 사용.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.domain.constants import (
    ANNOTATION_PREFIX,
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    PLACEHOLDER_SEGMENT,
)

DEFAULT_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
)


@dataclass(frozen=True)
class ParityConfig:
    """파이프라인 설정."""
    placeholder_segment: str = PLACEHOLDER_SEGMENT
    annotation_prefix: str = ANNOTATION_PREFIX
    timestamp_formats: tuple[str, ...] = DEFAULT_TIMESTAMP_FORMATS
    fail_on_duplicate_keys: bool = True
    max_diffs: int = 20
    source: Path | None = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: Path | None = None) -> "ParityConfig":
        """
        YAML dict → ParityConfig.

        알 수 없는 키는 무시, 누락된 키는 기본값.
        """
        parity = data.get("parity") or {}
        report = data.get("report") or {}
        defaults = cls()

        formats = parity.get("timestamp_formats")
        return cls(
            placeholder_segment=str(
                parity.get("placeholder_segment", defaults.placeholder_segment)
            ),
            annotation_prefix=str(
                parity.get("annotation_prefix", defaults.annotation_prefix)
            ),
            timestamp_formats=(
                tuple(str(f) for f in formats) if formats else defaults.timestamp_formats
            ),
            fail_on_duplicate_keys=bool(
                parity.get("fail_on_duplicate_keys", defaults.fail_on_duplicate_keys)
            ),
            max_diffs=int(report.get("max_diffs", defaults.max_diffs)),
            source=source,
        )


def default_config_path() -> Path:
    """프로젝트 루트의 default.yaml 경로."""
    return Path(__file__).parent.parent.parent / CONFIG_FILENAME


class ConfigError(ValueError):
    """설정 파일을 읽을 수 없음 (YAML 문법 오류, 잘못된 구조/타입)."""


def load_config_dict(config_path: Path | None = None) -> dict[str, Any]:
    """
    설정 파일 로드 (없으면 빈 dict).

    Raises:
        ConfigError: YAML 파싱 실패 또는 최상위가 mapping이 아님
    """
    if config_path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        config_path = Path(env_path) if env_path else default_config_path()

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        try:
            data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping in {config_path}, got {type(data).__name__}")
    return data


def load_config(config_path: Path | None = None) -> ParityConfig:
    """
    설정 로드.

    Args:
        config_path: 설정 파일 경로 (None이면 환경변수/기본 경로)

    Returns:
        ParityConfig

    Raises:
        ConfigError: 파일은 있으나 해석할 수 없음
    """
    if config_path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        config_path = Path(env_path) if env_path else default_config_path()

    data = load_config_dict(config_path)
    try:
        return ParityConfig.from_dict(data, source=config_path if data else None)
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
