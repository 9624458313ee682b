from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

@dataclass(frozen=True)
class CommitRecord:
    commit_hash: str
    author_name: str
    author_email: str
    timestamp: datetime  # committer date, UTC
    additions: int = 0
    deletions: int = 0

@dataclass(frozen=True)
class CodeActivityAuthor:
    email: str
    name: str
    commits: int

@dataclass(frozen=True)
class CodeActivityStats:
    commit_count: int
    author_count: int
    commit_count_in_all_branches: int
    additions: int
    deletions: int
    authors: Tuple[CodeActivityAuthor, ...] = ()
