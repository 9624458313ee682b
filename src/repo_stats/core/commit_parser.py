"""
Commit Stream Parser - git log 출력 파싱

``git log --numstat`` 출력을 CommitRecord 시퀀스로 변환합니다.
제너레이터로 동작하므로 전체 출력을 메모리에 올리지 않으며,
레코드 순서는 git 이 돌려준 순회 순서를 그대로 따릅니다.
"""
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import CommitParseError
from .vcs_models import CommitRecord
from ..utils.logger import get_logger

logger = get_logger(__name__)

COMMIT_MARKER = "---"

# 마커 다음 줄부터 hash, 작성자 이름, 작성자 이메일, 커미터 타임스탬프
COMMIT_LOG_FORMAT = f"--pretty=format:{COMMIT_MARKER}%n%H%n%aN%n%aE%n%ct"

_HEADER_FIELDS = 4


def log_arguments() -> List[str]:
    """커밋 스트림 파싱에 필요한 git log 인자"""
    return ["log", "--numstat", COMMIT_LOG_FORMAT]


def _parse_numstat(line: str) -> Optional[Tuple[int, int]]:
    parts = line.split("\t", 2)
    if len(parts) != 3:
        logger.warning(f"Skipping malformed numstat line: {line!r}")
        return None

    added, removed, path = parts
    if added == "-" and removed == "-":
        logger.debug(f"Binary change counted as zero lines: {path}")
        return 0, 0
    try:
        return int(added), int(removed)
    except ValueError:
        logger.warning(f"Skipping malformed numstat line: {line!r}")
        return None


def _build_record(header: List[str], additions: int, deletions: int) -> CommitRecord:
    if len(header) < _HEADER_FIELDS:
        raise CommitParseError(f"Truncated commit header: {header!r}")

    commit_hash, name, email, raw_timestamp = header
    try:
        timestamp = datetime.fromtimestamp(int(raw_timestamp), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        raise CommitParseError(f"Invalid commit timestamp {raw_timestamp!r} in {commit_hash}")

    return CommitRecord(
        commit_hash=commit_hash,
        author_name=name,
        author_email=email,
        timestamp=timestamp,
        additions=additions,
        deletions=deletions,
    )


def parse_commit_stream(lines: Iterable[str]) -> Iterator[CommitRecord]:
    """
    git log 출력 줄을 CommitRecord 로 변환

    머지 커밋이나 변경 줄이 없는 커밋은 additions/deletions 0 으로 생성됩니다.

    Args:
        lines: 줄바꿈이 제거된 git log 출력 줄

    Yields:
        순회 순서대로의 CommitRecord

    Raises:
        CommitParseError: 커밋 헤더가 잘렸거나 해석할 수 없는 경우
    """
    header: Optional[List[str]] = None
    additions = deletions = 0

    for line in lines:
        if line == COMMIT_MARKER and (header is None or len(header) >= _HEADER_FIELDS):
            if header is not None:
                yield _build_record(header, additions, deletions)
            header = []
            additions = deletions = 0
            continue

        if header is None:
            if line.strip():
                raise CommitParseError(f"Unexpected output before first commit: {line!r}")
            continue

        if len(header) < _HEADER_FIELDS:
            header.append(line)
            continue

        if not line.strip():
            continue

        counts = _parse_numstat(line)
        if counts is not None:
            additions += counts[0]
            deletions += counts[1]

    if header is not None:
        yield _build_record(header, additions, deletions)
