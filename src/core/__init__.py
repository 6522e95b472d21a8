"""
Core layer: 설정, 실행 로그, 해시, 산출물 입출력.

역할:
- default.yaml 설정 로드
- run log / 경고 기록
- 정규 레코드 배열 원자적 저장, digest
"""

from .artifacts import atomic_write_json, atomic_write_text, load_records, write_records
from .config import ConfigError, ParityConfig, load_config
from .hashing import compute_records_digest
from .ids import generate_run_id
from .logging import complete_run_log, create_run_log, emit_warning, save_run_log

__all__ = [
    # artifacts
    "atomic_write_json",
    "atomic_write_text",
    "load_records",
    "write_records",
    # config
    "ConfigError",
    "ParityConfig",
    "load_config",
    # hashing
    "compute_records_digest",
    # ids
    "generate_run_id",
    # logging
    "create_run_log",
    "emit_warning",
    "complete_run_log",
    "save_run_log",
]
