"""
Core modules for Repo Stats
"""

from .git_repository import GitRepository, open_repository
from .process_runner import CommandSpec, ProcessRunner, RunContext
from .commit_parser import parse_commit_stream
from .vcs_models import CommitRecord, CodeActivityAuthor, CodeActivityStats

__all__ = [
    "GitRepository",
    "open_repository",
    "CommandSpec",
    "ProcessRunner",
    "RunContext",
    "parse_commit_stream",
    "CommitRecord",
    "CodeActivityAuthor",
    "CodeActivityStats",
]
