"""
Logging Utility Module

엔진 전체에서 사용할 로깅 설정 및 유틸리티
"""
import logging
import time
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# 로그는 stderr 로 출력
console = Console(stderr=True)

LOGGER_NAME = "repo_stats"


def setup_logger(log_level: str = "INFO") -> logging.Logger:
    """
    repo_stats 로거에 Rich 핸들러와 레벨 적용

    여러 번 호출해도 핸들러는 하나만 유지됩니다.

    Args:
        log_level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        설정된 로거 객체
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(
            console=console,
            show_time=True,
            show_path=True,
            rich_tracebacks=True,
            markup=False,
        ))
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """repo_stats 하위 로거 반환"""
    if not name:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class LogContext:
    """작업 시작/완료/실패를 소요 시간과 함께 기록하는 컨텍스트 관리자"""

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or get_logger()
        self.start_time = None

    def __enter__(self):
        self.start_time = time.monotonic()
        self.logger.info(f"Starting {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.monotonic() - self.start_time
        if exc_type is None:
            self.logger.info(f"Completed {self.operation} in {elapsed:.2f} seconds")
        else:
            self.logger.error(f"Failed {self.operation} after {elapsed:.2f} seconds: {exc_val}")
        return False
