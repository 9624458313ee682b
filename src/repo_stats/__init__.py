"""
Repo Stats

git 저장소 활동 통계 엔진
"""

__version__ = "0.1.0"

# Core modules - Repository statistics
from .core.git_repository import GitRepository, open_repository

# Core modules - Process execution
from .core.process_runner import CommandSpec, ProcessRunner, RunContext, Success, Failed, Killed
from .core.termination import ProcessExitError, classify_termination
from .core.retry import call_with_deadline_retry

# Core modules - Data models and errors
from .core.vcs_models import CommitRecord, CodeActivityAuthor, CodeActivityStats
from .core.errors import RepoStatsError, ConfigError, QueryError, CommitParseError, CancelledError

# Utility modules - Configuration and logging
from .utils.config import StatsConfig
from .utils.logger import get_logger, setup_logger, LogContext

__all__ = [
    # Repository statistics
    "GitRepository",
    "open_repository",

    # Process execution
    "CommandSpec",
    "ProcessRunner",
    "RunContext",
    "Success",
    "Failed",
    "Killed",
    "ProcessExitError",
    "classify_termination",
    "call_with_deadline_retry",

    # Data models
    "CommitRecord",
    "CodeActivityAuthor",
    "CodeActivityStats",

    # Errors
    "RepoStatsError",
    "ConfigError",
    "QueryError",
    "CommitParseError",
    "CancelledError",

    # Configuration and utilities
    "StatsConfig",
    "get_logger",
    "setup_logger",
    "LogContext",
]
