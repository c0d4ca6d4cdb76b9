"""이진 마스크 외곽 윤곽 탐지"""

import cv2
import numpy as np

from headshot.schemas.pipeline import BBox
from headshot.services.detection.base import DetectionError
from headshot.services.detection.schemas import DetectionResult


class AlphaContourDetector:
    """외곽 윤곽마다 bounding rect를 반환. 점수는 윤곽 내부 면적."""

    def detect(self, image: np.ndarray) -> DetectionResult:
        if image.ndim != 2:
            raise DetectionError(f"단일 채널 마스크만 지원: shape={image.shape}")

        contours, _ = cv2.findContours(image, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        boxes = [BBox.from_rect(cv2.boundingRect(c)) for c in contours]
        scores = [float(cv2.contourArea(c)) for c in contours]
        return DetectionResult(boxes=boxes, scores=scores)
