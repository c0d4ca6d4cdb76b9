"""피사체 영역 crop + 목표 높이로 스케일"""

import logging

from celery.exceptions import SoftTimeLimitExceeded
from PIL import Image

from headshot.schemas.pipeline import BBox

logger = logging.getLogger(__name__)


class CropError(Exception):
    pass


def scaled_width(crop_width: int, crop_height: int, target_height: int) -> int:
    """crop 결과의 종횡비 기준 너비 (원본 이미지 기준 아님)"""
    scale_y = target_height / crop_height
    return max(1, round(crop_width * scale_y))


def _crop(image: Image.Image, box: BBox) -> Image.Image:
    clipped = box.clip(image.width, image.height)
    if not clipped.is_valid():
        raise CropError(f"crop 영역이 이미지 밖: box={box}, image={image.width}x{image.height}")
    return image.crop(clipped.to_box())


def crop_and_scale(image: Image.Image, box: BBox, target_height: int) -> Image.Image | None:
    """box 영역을 잘라 높이 target_height로 Lanczos 리샘플링

    box는 이미지 경계로 클리핑된 뒤 사용됨.

    Returns:
        높이가 정확히 target_height인 이미지. crop 실패 시 None
    """
    if target_height <= 0:
        logger.warning(f"유효하지 않은 목표 높이: {target_height}")
        return None

    try:
        cropped = _crop(image, box)
    except CropError as e:
        logger.warning(f"Crop 실패: {e}")
        return None
    except SoftTimeLimitExceeded:
        raise
    except Exception as e:
        logger.warning(f"Crop 실패: box={box} ({e})")
        return None

    try:
        new_width = scaled_width(cropped.width, cropped.height, target_height)
        return cropped.resize((new_width, target_height), Image.Resampling.LANCZOS)
    except SoftTimeLimitExceeded:
        raise
    except Exception as e:
        logger.warning(f"Crop 리샘플링 실패: target_height={target_height} ({e})")
        return None
    finally:
        cropped.close()
