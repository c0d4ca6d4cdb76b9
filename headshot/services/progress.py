"""진행 상황 알림 (현재 파일 / 상태 메시지 / 이미지별 진행률)

알림은 fire-and-forget. 옵저버에서 발생한 예외는 로그만 남기고 처리를 계속함.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ProgressObserver(Protocol):
    """배치 진행 상황 수신 인터페이스

    구현체:
    - LoggingObserver: 로그 출력 (기본값)
    - RedisProgressObserver: Redis 배치 메타데이터 갱신 (API 폴링용)
    - TqdmObserver: CLI 진행 바
    """

    def current_file(self, name: str) -> None:
        """처리 시작한 파일 이름"""
        ...

    def status(self, message: str) -> None:
        """상태 메시지 (예: "(3/10) Processing image...")"""
        ...

    def image_progress(self, percent: int) -> None:
        """현재 이미지의 프리셋 진행률 (0-100)"""
        ...


class LoggingObserver:
    def current_file(self, name: str) -> None:
        logger.info(f"처리 시작: {name}")

    def status(self, message: str) -> None:
        logger.info(message)

    def image_progress(self, percent: int) -> None:
        logger.debug(f"이미지 진행률: {percent}%")


class SafeObserver:
    """옵저버 호출 실패가 처리 흐름을 끊지 않도록 감싸는 래퍼"""

    def __init__(self, observer: ProgressObserver | None) -> None:
        self._observer = observer or LoggingObserver()

    def current_file(self, name: str) -> None:
        try:
            self._observer.current_file(name)
        except Exception:
            logger.exception(f"진행 알림 실패 (current_file={name})")

    def status(self, message: str) -> None:
        try:
            self._observer.status(message)
        except Exception:
            logger.exception(f"진행 알림 실패 (status={message})")

    def image_progress(self, percent: int) -> None:
        try:
            self._observer.image_progress(percent)
        except Exception:
            logger.exception(f"진행 알림 실패 (image_progress={percent})")
