"""OpenCV YuNet (FaceDetectorYN) 얼굴 탐지 구현체

ONNX 모델 파일이 필요함:
https://github.com/opencv/opencv_zoo/tree/main/models/face_detection_yunet
"""

from pathlib import Path

import cv2
import numpy as np

from headshot.constants import YuNetParams
from headshot.schemas.pipeline import BBox
from headshot.services.detection.base import DetectionError
from headshot.services.detection.schemas import DetectionResult


class YuNetDetector:
    """학습 모델 기반 얼굴 탐지. confidence 대신 박스 면적으로 순위를 매김."""

    def __init__(
        self,
        model_path: str,
        score_threshold: float = 0.6,
        nms_threshold: float = YuNetParams.NMS_THRESHOLD,
    ) -> None:
        if not Path(model_path).is_file():
            raise DetectionError(f"YuNet 모델 파일 없음: {model_path}")
        self._detector = cv2.FaceDetectorYN.create(model_path, "", (0, 0))
        self._detector.setScoreThreshold(score_threshold)
        self._detector.setNMSThreshold(nms_threshold)

    def detect(self, image: np.ndarray) -> DetectionResult:
        if image.ndim != 2:
            raise DetectionError(f"그레이스케일 이미지만 지원: shape={image.shape}")

        img_h, img_w = image.shape[:2]
        if img_h <= 0 or img_w <= 0:
            return DetectionResult()

        # YuNet은 3채널 입력만 받음
        bgr = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        self._detector.setInputSize((img_w, img_h))
        _, faces = self._detector.detect(bgr)
        if faces is None:
            return DetectionResult()

        boxes: list[BBox] = []
        for face in faces:
            x, y, w, h = (int(v) for v in face[:4])
            box = BBox(x=x, y=y, width=w, height=h).clip(img_w, img_h)
            if box.is_valid():
                boxes.append(box)
        return DetectionResult(boxes=boxes)
