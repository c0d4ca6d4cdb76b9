"""Detection 모듈

사용법:
    from headshot.services.detection import get_face_detection

    detector = get_face_detection()
    result = detector.detect(gray)
    face = result.largest()

얼굴 탐지 백엔드 선택 (.env FACE_DETECTION_PROVIDER):
    - "haar": OpenCV Haar cascade (기본값)
    - "yunet": OpenCV FaceDetectorYN (ONNX 모델 필요)

피사체 위치(alpha 윤곽)는 항상 AlphaContourDetector 사용.
"""

from headshot.config import get_settings
from headshot.services.detection.base import DetectionError, Detector
from headshot.services.detection.contour import AlphaContourDetector
from headshot.services.detection.haar import HaarCascadeDetector
from headshot.services.detection.schemas import DetectionResult

__all__ = [
    "AlphaContourDetector",
    "DetectionError",
    "DetectionResult",
    "Detector",
    "get_face_detection",
    "set_face_detection",
]

_face_detector: Detector | None = None


def get_face_detection() -> Detector:
    """설정에 따라 얼굴 탐지 백엔드 반환"""
    global _face_detector
    if _face_detector is None:
        settings = get_settings()
        if settings.face_detection_provider == "haar":
            _face_detector = HaarCascadeDetector(cascade_path=settings.haar_cascade_path or None)
        elif settings.face_detection_provider == "yunet":
            from headshot.services.detection.yunet import YuNetDetector

            _face_detector = YuNetDetector(
                model_path=settings.yunet_model_path,
                score_threshold=settings.yunet_score_threshold,
            )
        else:
            raise ValueError(
                f"Unknown face detection provider: {settings.face_detection_provider!r}"
            )
    return _face_detector


def set_face_detection(detector: Detector | None) -> None:
    """얼굴 탐지 백엔드 설정 (테스트용)"""
    global _face_detector
    _face_detector = detector
