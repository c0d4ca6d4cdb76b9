"""Detection Protocol

교체 가능한 윤곽/얼굴 탐지 구현을 위한 인터페이스 정의.
모든 좌표는 입력 이미지 기준 절대 좌표(px).
"""

from typing import Protocol

import numpy as np

from headshot.services.detection.schemas import DetectionResult


class DetectionError(Exception):
    pass


class Detector(Protocol):
    """윤곽/얼굴 탐지 인터페이스

    구현체:
    - AlphaContourDetector: 이진 마스크 외곽 윤곽 (피사체 위치)
    - HaarCascadeDetector: OpenCV Haar cascade 정면 얼굴
    - YuNetDetector: OpenCV FaceDetectorYN (ONNX)
    """

    def detect(self, image: np.ndarray) -> DetectionResult:
        """단일 채널 이미지에서 후보 영역 탐지

        Args:
            image: 그레이스케일 또는 이진 마스크 (H, W) uint8

        Returns:
            DetectionResult: 후보 박스 (0개 이상)

        Raises:
            DetectionError: 입력 형식 오류 또는 백엔드 초기화 실패 시
        """
        ...
