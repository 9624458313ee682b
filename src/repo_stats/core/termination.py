"""
Termination Classifier - 하위 프로세스 종료 원인 판별

프로세스 wait 결과가 강제 kill(SIGKILL)에 의한 것인지, 일반적인 실패 종료인지
판별합니다. POSIX 계열은 wait status(음수 return code)로 신호를 직접 확인하고,
신호 정보를 신뢰할 수 없는 Windows에서는 오류 메시지 문자열 비교로 대체합니다.

Windows 경로는 best-effort 입니다. Windows에서 종료된 프로세스는 항상
exit code 1을 돌려주므로 ``"signal: killed"`` 메시지가 만들어지지 않고,
결과적으로 항상 False가 됩니다. 실제 실패를 취소로 오인하지 않도록
매칭 범위를 넓히지 않습니다.
"""
import os
import signal
from typing import Callable, List, Optional, Union

from git import GitCommandError

# Windows에는 signal.SIGKILL이 없음
SIGKILL = getattr(signal, "SIGKILL", 9)

KILLED_MESSAGE = "signal: killed"

_SIGNAL_DESCRIPTIONS = {
    SIGKILL: "killed",
    getattr(signal, "SIGTERM", 15): "terminated",
    getattr(signal, "SIGINT", 2): "interrupt",
    getattr(signal, "SIGSEGV", 11): "segmentation fault",
    getattr(signal, "SIGPIPE", 13): "broken pipe",
}


class ProcessExitError(GitCommandError):
    """하위 프로세스의 0이 아닌 종료 상태 (wait 결과)"""

    def __init__(self, command: Union[List[str], str], returncode: int, stderr: str = ""):
        super().__init__(command, returncode, stderr)
        self.returncode = returncode
        self.stderr = stderr

    @property
    def signaled(self) -> bool:
        return self.returncode < 0

    @property
    def signal_number(self) -> Optional[int]:
        return -self.returncode if self.signaled else None

    def __str__(self) -> str:
        if self.signaled:
            return f"signal: {describe_signal(-self.returncode)}"
        return f"exit status {self.returncode}"


def describe_signal(signum: int) -> str:
    if signum in _SIGNAL_DESCRIPTIONS:
        return _SIGNAL_DESCRIPTIONS[signum]
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


def is_killed_by_signal(err: Optional[BaseException]) -> bool:
    """
    wait status로 SIGKILL 종료 여부 판별 (POSIX)

    Args:
        err: 프로세스 wait가 돌려준 오류

    Returns:
        SIGKILL로 종료된 경우에만 True
    """
    if not isinstance(err, ProcessExitError):
        return False
    return err.signaled and err.signal_number == SIGKILL


def is_killed_by_message(err: Optional[BaseException]) -> bool:
    """
    오류 메시지로 kill 여부 판별 (Windows, best-effort)

    Args:
        err: 프로세스 wait가 돌려준 오류

    Returns:
        메시지가 정확히 ``"signal: killed"`` 인 경우에만 True
    """
    return err is not None and str(err) == KILLED_MESSAGE


classify_termination: Callable[[Optional[BaseException]], bool]
if os.name == "nt":
    classify_termination = is_killed_by_message
else:
    classify_termination = is_killed_by_signal
