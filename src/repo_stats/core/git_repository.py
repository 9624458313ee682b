"""
Git Repository Module - 저장소 활동 통계

이 모듈은 git 하위 프로세스의 출력을 스트리밍으로 읽어
커밋/작성자 활동 통계와 기여자 수를 계산합니다.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

import git
from git import Repo

from .commit_parser import log_arguments, parse_commit_stream
from .errors import CancelledError, ConfigError, QueryError
from .process_runner import CommandSpec, Failed, Killed, ProcessRunner, RunContext
from .vcs_models import CodeActivityAuthor, CodeActivityStats
from ..utils.config import StatsConfig
from ..utils.logger import LogContext, get_logger, setup_logger

logger = get_logger(__name__)

ALL_BRANCHES = "--branches=*"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _since_arguments(since: Optional[datetime]) -> List[str]:
    if since is None:
        return []
    return ["--since=" + _as_utc(since).strftime("%Y-%m-%d %H:%M:%S +0000")]


def _check_branch(branch: str) -> None:
    if branch.startswith("-"):
        raise QueryError(f"Invalid branch name: {branch!r}")


class GitRepository:
    """git 저장소 통계 조회 클래스"""

    def __init__(self, repo_path: str, config: Optional[StatsConfig] = None):
        """
        GitRepository 초기화

        Args:
            repo_path: 저장소 경로 (bare 저장소 허용)
            config: 엔진 설정 (None이면 환경 변수에서 로드)

        Raises:
            ConfigError: 경로가 없거나 git 저장소가 아닌 경우, 로그 레벨이 잘못된 경우
        """
        self.repo_path = Path(repo_path).resolve()
        self.config = config or StatsConfig.from_env()
        try:
            setup_logger(self.config.log_level)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        self.runner = ProcessRunner(
            grace_period=self.config.termination_grace,
            poll_interval=self.config.poll_interval,
        )
        self._repo: Optional[Repo] = None
        self._initialize_repo()

    def _initialize_repo(self) -> None:
        """저장소 열기 및 검증"""
        try:
            self._repo = Repo(self.repo_path)
        except git.NoSuchPathError:
            raise ConfigError(f"Repository path does not exist: {self.repo_path}")
        except git.InvalidGitRepositoryError:
            raise ConfigError(f"Invalid Git repository at {self.repo_path}")
        logger.debug(f"Opened repository at {self.repo_path} (bare={self._repo.bare})")

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            self._initialize_repo()
        return self._repo

    @property
    def work_dir(self) -> str:
        return self.repo.working_tree_dir or self.repo.git_dir

    def close(self) -> None:
        if self._repo is not None:
            self._repo.close()
            self._repo = None

    def __enter__(self) -> "GitRepository":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _context(self, ctx: Optional[RunContext]) -> RunContext:
        if ctx is not None:
            return ctx
        if self.config.default_timeout:
            return RunContext.with_timeout(self.config.default_timeout)
        return RunContext.background()

    def _run(self, args: List[str], ctx: RunContext, consumer: Callable[[Iterator[str]], Any]) -> Any:
        """git 명령 실행 후 결과를 값 또는 예외로 변환"""
        spec = CommandSpec(self.config.git_executable, args, cwd=self.work_dir)
        outcome = self.runner.run(spec, ctx, consumer)

        if isinstance(outcome, Killed):
            logger.info(f"git {args[0]} cancelled: {outcome.reason}")
            raise CancelledError(outcome.reason)
        if isinstance(outcome, Failed):
            logger.error(f"git {args[0]} failed with exit status {outcome.exit_code}")
            raise QueryError(
                f"git {args[0]} exited with status {outcome.exit_code}",
                stderr=outcome.stderr,
                exit_code=outcome.exit_code,
            )
        return outcome.value

    def _count_all_branches(self, since: Optional[datetime], branch: str, ctx: RunContext) -> int:
        """로컬 브랜치 전체와 조회 대상 ref 의 합집합 커밋 수"""
        def read_count(lines: Iterator[str]) -> int:
            output = "".join(lines).strip()
            try:
                return int(output)
            except ValueError:
                raise QueryError(f"Unexpected rev-list output: {output!r}")

        # 태그나 원격 추적 ref 를 조회해도 branch 쪽 커밋이 빠지지 않도록 함께 넘김
        args = ["rev-list", "--count", ALL_BRANCHES] + _since_arguments(since) + [branch, "--"]
        return self._run(args, ctx, read_count)

    def get_code_activity_stats(
        self,
        since: Optional[datetime],
        branch: str = "",
        ctx: Optional[RunContext] = None,
    ) -> CodeActivityStats:
        """
        기간 내 코드 활동 통계 계산

        Args:
            since: 시작 시각 (포함)
            branch: 대상 브랜치 (빈 문자열이면 모든 브랜치)
            ctx: 취소/기한 컨텍스트

        Returns:
            CodeActivityStats

        Raises:
            QueryError: git 명령 실패 또는 해석 불가능한 출력
            CancelledError: 취소, 타임아웃 또는 kill 로 중단된 경우
        """
        ctx = self._context(ctx)
        args = log_arguments() + _since_arguments(since)
        if branch:
            _check_branch(branch)
            args += [branch, "--"]
        else:
            args.append(ALL_BRANCHES)

        def accumulate(lines: Iterator[str]) -> Dict[str, Any]:
            totals = {"commits": 0, "additions": 0, "deletions": 0}
            # 삽입 순서 = 첫 등장 순서
            authors: Dict[str, List[Any]] = {}
            for record in parse_commit_stream(lines):
                totals["commits"] += 1
                totals["additions"] += record.additions
                totals["deletions"] += record.deletions
                if record.author_email in authors:
                    authors[record.author_email][1] += 1
                else:
                    authors[record.author_email] = [record.author_name, 1]
            totals["authors"] = authors
            return totals

        with LogContext(f"code activity stats for {self.repo_path.name}", logger):
            totals = self._run(args, ctx, accumulate)

            if branch:
                all_branches = self._count_all_branches(since, branch, ctx)
            else:
                all_branches = totals["commits"]

        ranked = sorted(totals["authors"].items(), key=lambda item: -item[1][1])
        authors = tuple(
            CodeActivityAuthor(email=email, name=name, commits=commits)
            for email, (name, commits) in ranked
        )
        return CodeActivityStats(
            commit_count=totals["commits"],
            author_count=len(authors),
            commit_count_in_all_branches=all_branches,
            additions=totals["additions"],
            deletions=totals["deletions"],
            authors=authors,
        )

    def get_contributor_count(
        self,
        branch: str,
        since: Optional[datetime] = None,
        ctx: Optional[RunContext] = None,
    ) -> int:
        """
        브랜치의 서로 다른 작성자 수

        Args:
            branch: 대상 브랜치 (존재해야 함)
            since: 이 시각 이후(초과) 커밋만 집계 (None이면 전체)
            ctx: 취소/기한 컨텍스트

        Returns:
            작성자 이메일 기준 기여자 수
        """
        _check_branch(branch)
        ctx = self._context(ctx)
        threshold = _as_utc(since) if since is not None else None

        args = log_arguments() + _since_arguments(threshold) + [branch, "--"]

        def collect(lines: Iterator[str]) -> int:
            emails = set()
            for record in parse_commit_stream(lines):
                # since 초과만 집계. since 가 첫 커밋 시각과 같으면 첫 커밋도 제외되므로
                # 전체 집계와 같아지려면 since 가 첫 커밋보다 앞서야 함
                if threshold is None or record.timestamp > threshold:
                    emails.add(record.author_email)
            return len(emails)

        count = self._run(args, ctx, collect)
        logger.debug(f"{count} contributors on {branch} since {threshold}")
        return count


def open_repository(repo_path: str, config: Optional[StatsConfig] = None) -> GitRepository:
    """
    저장소 핸들을 생성합니다.

    Args:
        repo_path: git 저장소 경로

    Returns:
        GitRepository 인스턴스
    """
    return GitRepository(repo_path, config=config)
