"""피사체 위치 탐지 (alpha 채널 윤곽)"""

import logging

import cv2
import numpy as np
from celery.exceptions import SoftTimeLimitExceeded
from PIL import Image

from headshot.constants import Pipeline
from headshot.schemas.pipeline import BBox
from headshot.services.detection import AlphaContourDetector, Detector

logger = logging.getLogger(__name__)


def alpha_mask(image: Image.Image) -> np.ndarray | None:
    """alpha 채널 이진 마스크 (alpha > threshold → 255). alpha가 없으면 None"""
    if not image.has_transparency_data:
        return None
    alpha = np.asarray(image.convert("RGBA").getchannel("A"))
    _, mask = cv2.threshold(alpha, Pipeline.ALPHA_THRESHOLD, 255, cv2.THRESH_BINARY)
    return mask


def locate_subject(image: Image.Image, detector: Detector | None = None) -> BBox | None:
    """투명 배경 이미지에서 피사체 bounding box 반환

    가장 큰 외곽 윤곽을 피사체로 간주.

    Args:
        image: 투명 배경 이미지 (RGBA, LA, 또는 transparency가 있는 P)
        detector: 윤곽 탐지기 (기본값 AlphaContourDetector)

    Returns:
        피사체 BBox. alpha 채널이 없거나 윤곽이 없거나 처리 중 오류 시 None
    """
    try:
        mask = alpha_mask(image)
        if mask is None:
            logger.warning("이미지에 alpha 채널(투명도)이 없음")
            return None

        result = (detector or AlphaContourDetector()).detect(mask)
        box = result.largest()
        if box is None:
            logger.warning("alpha 마스크에서 피사체 윤곽을 찾지 못함")
            return None

        logger.debug(f"피사체 위치: {box} (후보 {len(result)}개)")
        return box

    except SoftTimeLimitExceeded:
        raise
    except Exception as e:
        logger.warning(f"피사체 탐지 실패: {e}")
        return None
