"""
Utility modules for Repo Stats
"""

from .config import StatsConfig
from .logger import get_logger, setup_logger, LogContext

__all__ = [
    "StatsConfig",
    "get_logger",
    "setup_logger",
    "LogContext",
]
