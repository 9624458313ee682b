"""
Configuration Management Module

환경 변수 및 설정 파일을 관리하는 모듈
"""
import logging
import os
import json
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, fields
from dotenv import load_dotenv

# 환경 변수 로드
load_dotenv()


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass
class StatsConfig:
    """통계 엔진 설정"""
    git_executable: str = "git"
    termination_grace: float = 5.0
    poll_interval: float = 0.05
    default_timeout: Optional[float] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> 'StatsConfig':
        """환경 변수에서 설정 로드"""
        return cls(
            git_executable=os.getenv('REPO_STATS_GIT_EXECUTABLE', 'git'),
            termination_grace=float(os.getenv('REPO_STATS_TERMINATION_GRACE', '5.0')),
            poll_interval=float(os.getenv('REPO_STATS_POLL_INTERVAL', '0.05')),
            default_timeout=_optional_float(os.getenv('REPO_STATS_DEFAULT_TIMEOUT')),
            log_level=os.getenv('REPO_STATS_LOG_LEVEL', 'INFO'),
        )

    @classmethod
    def from_file(cls, config_file: str) -> 'StatsConfig':
        """환경 변수 설정을 JSON 설정 파일로 오버라이드"""
        config_path = Path(config_file)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        config = cls.from_env()
        config._update_from_dict(data)
        return config

    def _update_from_dict(self, data: Dict[str, Any]):
        """딕셔너리에서 설정 업데이트"""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)

    def validate(self) -> List[str]:
        """설정 유효성 검증"""
        errors = []

        if not self.git_executable:
            errors.append("git executable is not configured")
        if self.termination_grace < 0:
            errors.append("termination grace period must not be negative")
        if self.poll_interval <= 0:
            errors.append("poll interval must be positive")
        if self.default_timeout is not None and self.default_timeout <= 0:
            errors.append("default timeout must be positive")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            errors.append(f"unknown log level: {self.log_level}")

        return errors
