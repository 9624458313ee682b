"""
Process Runner Module - 취소 가능한 하위 프로세스 실행

외부 명령(git)을 하위 프로세스로 실행하고, 표준 출력을 소비자(consumer)에게
스트리밍으로 전달한 뒤 결과를 Success / Failed / Killed 로 분류합니다.
호출자의 RunContext가 취소되거나 기한이 지나면 종료 요청을 보내고,
유예 시간이 지나면 강제 kill 합니다. 모든 경로에서 프로세스를 회수(wait)합니다.
"""
import io
import subprocess
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional, Union

from git.cmd import Git
from git.exc import GitCommandNotFound

from .errors import ConfigError
from .termination import ProcessExitError, classify_termination
from ..utils.logger import get_logger

logger = get_logger(__name__)

# 부모 컨텍스트 취소를 감지하기 위한 폴링 간격 (초)
_PARENT_POLL = 0.05

# 보관할 stderr 최대 크기 (바이트), 넘치면 뒷부분만 유지
_STDERR_LIMIT = 64 * 1024


class RunContext:
    """취소와 기한(deadline)을 전달하는 실행 컨텍스트"""

    def __init__(self, deadline: Optional[float] = None, parent: Optional["RunContext"] = None):
        """
        Args:
            deadline: time.monotonic() 기준 만료 시각 (None이면 무기한)
            parent: 취소와 기한을 상속할 부모 컨텍스트
        """
        self._cancelled = threading.Event()
        self._deadline = deadline
        self._parent = parent

    @classmethod
    def background(cls) -> "RunContext":
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "RunContext":
        return cls(deadline=time.monotonic() + seconds)

    def child(self, timeout: Optional[float] = None) -> "RunContext":
        """부모가 취소되면 함께 취소되고, 두 기한 중 이른 쪽을 따르는 하위 컨텍스트"""
        deadline = None if timeout is None else time.monotonic() + timeout
        return RunContext(deadline=deadline, parent=self)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def expired(self) -> bool:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return True
        return self._parent is not None and self._parent.expired

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    @property
    def reason(self) -> Optional[str]:
        if self.cancelled:
            return "context cancelled"
        if self.expired:
            return "context deadline exceeded"
        return None

    def remaining(self) -> Optional[float]:
        """만료까지 남은 시간(초). 기한이 없으면 None"""
        candidates = []
        if self._deadline is not None:
            candidates.append(max(0.0, self._deadline - time.monotonic()))
        if self._parent is not None:
            parent_remaining = self._parent.remaining()
            if parent_remaining is not None:
                candidates.append(parent_remaining)
        return min(candidates) if candidates else None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        컨텍스트가 끝나거나 timeout이 지날 때까지 대기

        Returns:
            컨텍스트 종료 여부 (done)
        """
        until = None if timeout is None else time.monotonic() + timeout
        while not self.done:
            wait_for = self.remaining()
            if until is not None:
                left = until - time.monotonic()
                if left <= 0:
                    break
                wait_for = left if wait_for is None else min(wait_for, left)
            if self._parent is not None:
                wait_for = _PARENT_POLL if wait_for is None else min(wait_for, _PARENT_POLL)
            self._cancelled.wait(wait_for)
        return self.done


@dataclass(frozen=True)
class CommandSpec:
    executable: str
    args: List[str] = field(default_factory=list)
    cwd: Optional[str] = None

    @property
    def argv(self) -> List[str]:
        return [self.executable, *self.args]


@dataclass(frozen=True)
class Success:
    value: Any = None


@dataclass(frozen=True)
class Failed:
    exit_code: int
    stderr: str = ""


@dataclass(frozen=True)
class Killed:
    reason: str


RunOutcome = Union[Success, Failed, Killed]


class _LineStream:
    """stdout 줄 단위 반복자. 끝까지 읽었는지 기록"""

    def __init__(self, stream: io.TextIOBase):
        self._stream = stream
        self.exhausted = False

    def __iter__(self) -> Iterator[str]:
        for line in self._stream:
            yield line.rstrip("\n")
        self.exhausted = True


class ProcessRunner:
    """하위 프로세스 실행 및 종료 분류"""

    def __init__(self, grace_period: float = 5.0, poll_interval: float = 0.05):
        """
        Args:
            grace_period: 종료 요청 후 강제 kill 까지의 유예 시간 (초)
            poll_interval: 컨텍스트 감시 간격 (초)
        """
        self.grace_period = grace_period
        self.poll_interval = poll_interval

    def run(
        self,
        spec: CommandSpec,
        ctx: RunContext,
        consumer: Callable[[Iterator[str]], Any],
    ) -> RunOutcome:
        """
        명령 실행 후 stdout을 consumer에 전달하고 결과를 분류

        Args:
            spec: 실행할 명령
            ctx: 취소/기한 컨텍스트
            consumer: stdout 줄 반복자를 받아 결과 값을 돌려주는 함수

        Returns:
            Success(consumer 결과), Failed(exit code, stderr), Killed(사유)

        Raises:
            ConfigError: 실행 파일을 찾을 수 없는 경우
        """
        if ctx.done:
            logger.debug(f"Not starting {spec.executable}: {ctx.reason}")
            return Killed(ctx.reason)

        try:
            handle = Git(spec.cwd).execute(spec.argv, as_process=True)
        except GitCommandNotFound as e:
            raise ConfigError(f"Executable not found: {spec.executable}") from e

        proc = handle.proc
        started = time.monotonic()
        logger.debug(f"Started pid {proc.pid}: {' '.join(spec.argv)}")

        finished = threading.Event()
        killed = threading.Event()
        watchdog = threading.Thread(
            target=self._watch,
            args=(proc, ctx, finished, killed),
            name=f"repo-stats-watch-{proc.pid}",
            daemon=True,
        )
        watchdog.start()

        # 파이프가 가득 차 자식이 멈추지 않도록 stderr는 별도 스레드에서 계속 읽음
        stderr_buffer = bytearray()
        drainer = threading.Thread(
            target=_drain_stderr,
            args=(proc.stderr, stderr_buffer),
            name=f"repo-stats-stderr-{proc.pid}",
            daemon=True,
        )
        drainer.start()

        stdout = io.TextIOWrapper(proc.stdout, encoding="utf-8", errors="replace", newline="\n")
        value = None
        stopped_early = False
        try:
            lines = _LineStream(stdout)
            try:
                value = consumer(iter(lines))
            except Exception as e:
                # 강제 종료로 잘린 출력에서 난 오류는 취소로 보고
                if not killed.is_set():
                    raise
                logger.debug(f"Discarding consumer error after termination: {e}")
            else:
                if not lines.exhausted and not killed.is_set():
                    stopped_early = True
                    logger.debug(f"Consumer stopped early, terminating pid {proc.pid}")
                    self._terminate(proc)
            returncode = proc.wait()
        finally:
            finished.set()
            watchdog.join()
            if proc.poll() is None:
                self._terminate(proc)
            proc.wait()
            drainer.join(timeout=self.grace_period)
            stdout.close()
            if proc.stderr is not None:
                proc.stderr.close()

        logger.debug(
            f"pid {proc.pid} exited with {proc.returncode} "
            f"after {time.monotonic() - started:.2f} seconds"
        )

        if killed.is_set():
            return Killed(ctx.reason or "context done")
        if stopped_early:
            return Success(value)
        if returncode != 0:
            stderr = bytes(stderr_buffer).decode("utf-8", errors="replace")
            err = ProcessExitError(spec.argv, returncode, stderr)
            if classify_termination(err):
                logger.warning(f"pid {proc.pid} was killed: {err}")
                return Killed(str(err))
            return Failed(returncode, stderr)
        return Success(value)

    def _watch(
        self,
        proc: subprocess.Popen,
        ctx: RunContext,
        finished: threading.Event,
        killed: threading.Event,
    ) -> None:
        while not finished.is_set():
            if ctx.wait(self.poll_interval) and not finished.is_set():
                killed.set()
                logger.info(f"Terminating pid {proc.pid}: {ctx.reason}")
                self._terminate(proc)
                return

    def _terminate(self, proc: subprocess.Popen) -> None:
        proc.terminate()
        try:
            proc.wait(timeout=self.grace_period)
        except subprocess.TimeoutExpired:
            logger.warning(f"pid {proc.pid} ignored termination request, killing")
            proc.kill()
            proc.wait()


def _drain_stderr(pipe, buffer: bytearray) -> None:
    """stderr 를 EOF 까지 읽어 마지막 _STDERR_LIMIT 바이트만 보관"""
    if pipe is None:
        return
    for chunk in iter(lambda: pipe.read(8192), b""):
        buffer.extend(chunk)
        if len(buffer) > _STDERR_LIMIT:
            del buffer[:len(buffer) - _STDERR_LIMIT]
