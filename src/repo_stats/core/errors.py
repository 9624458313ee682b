"""
Error Types - 저장소 통계 엔진의 오류 분류

호출자가 재시도 여부를 판단할 수 있도록 설정 오류, 조회 오류,
취소를 서로 다른 예외 타입으로 구분합니다.
"""
from typing import Optional


class RepoStatsError(Exception):
    """저장소 통계 엔진 예외의 기본 클래스"""


class ConfigError(RepoStatsError):
    """실행 파일 누락, 잘못된 저장소 경로 등 환경 설정 오류 (재시도하지 않음)"""


class QueryError(RepoStatsError):
    """git 명령이 kill 이외의 이유로 실패했거나 출력을 해석할 수 없는 경우"""

    def __init__(self, message: str, stderr: str = "", exit_code: Optional[int] = None):
        super().__init__(message)
        self.stderr = stderr
        self.exit_code = exit_code

    def __str__(self) -> str:
        text = super().__str__()
        if self.stderr:
            return f"{text}: {self.stderr.strip()}"
        return text


class CommitParseError(QueryError):
    """커밋 스트림의 헤더를 해석할 수 없는 경우"""


class CancelledError(RepoStatsError):
    """하위 프로세스가 취소, 타임아웃 또는 외부 kill로 종료된 경우"""

    def __init__(self, reason: str):
        super().__init__(f"operation cancelled: {reason}")
        self.reason = reason
