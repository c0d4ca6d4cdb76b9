"""OpenCV Haar cascade 정면 얼굴 탐지 구현체"""

from pathlib import Path

import cv2
import numpy as np

from headshot.constants import HaarParams
from headshot.schemas.pipeline import BBox
from headshot.services.detection.base import DetectionError
from headshot.services.detection.schemas import DetectionResult


def default_cascade_path() -> str:
    return str(Path(cv2.data.haarcascades) / HaarParams.CASCADE_FILENAME)


class HaarCascadeDetector:
    """Haar cascade 기반 얼굴 탐지

    scale step을 잘게, 이웃 투표 기준을 낮게 잡아 누락보다 오탐을 허용.
    """

    def __init__(
        self,
        cascade_path: str | None = None,
        scale_factor: float = HaarParams.SCALE_FACTOR,
        min_neighbors: int = HaarParams.MIN_NEIGHBORS,
        min_size: tuple[int, int] = HaarParams.MIN_SIZE,
    ) -> None:
        path = cascade_path or default_cascade_path()
        self._classifier = cv2.CascadeClassifier(path)
        if self._classifier.empty():
            raise DetectionError(f"Haar cascade 로드 실패: {path}")
        self._scale_factor = scale_factor
        self._min_neighbors = min_neighbors
        self._min_size = min_size

    def detect(self, image: np.ndarray) -> DetectionResult:
        if image.ndim != 2:
            raise DetectionError(f"그레이스케일 이미지만 지원: shape={image.shape}")

        faces = self._classifier.detectMultiScale(
            image,
            scaleFactor=self._scale_factor,
            minNeighbors=self._min_neighbors,
            minSize=self._min_size,
        )
        return DetectionResult(boxes=[BBox.from_rect(tuple(f)) for f in faces])
