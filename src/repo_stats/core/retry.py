"""
Deadline Retry - 취소된 조회를 더 긴 기한으로 재시도

CancelledError 만 재시도합니다. QueryError / ConfigError 는
재시도해도 같은 결과가 나오므로 즉시 전파합니다.
"""
from typing import Any, Callable

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from .errors import CancelledError
from .process_runner import RunContext
from ..utils.logger import get_logger

logger = get_logger(__name__)


def call_with_deadline_retry(
    operation: Callable[[RunContext], Any],
    timeout: float,
    attempts: int = 3,
    backoff: float = 2.0,
) -> Any:
    """
    기한을 늘려가며 operation(ctx) 호출

    Args:
        operation: RunContext 를 받는 조회 함수
        timeout: 첫 시도의 기한 (초)
        attempts: 최대 시도 횟수
        backoff: 시도마다 기한에 곱할 배수

    Returns:
        operation 결과

    Raises:
        CancelledError: 모든 시도가 기한 내에 끝나지 않은 경우
    """
    retrying = Retrying(
        retry=retry_if_exception_type(CancelledError),
        stop=stop_after_attempt(attempts),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            number = attempt.retry_state.attempt_number
            deadline = timeout * backoff ** (number - 1)
            if number > 1:
                logger.info(f"Retrying with a {deadline:.1f}s deadline (attempt {number}/{attempts})")
            return operation(RunContext.with_timeout(deadline))
