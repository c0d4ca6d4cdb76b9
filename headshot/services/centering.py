"""얼굴 기준 수평 정렬 + 흰 배경 합성

Zoom → Grayscale → 얼굴 탐지 → 수평 이동(warpAffine) → 흰 캔버스 합성 순서로 실행.
수직 정렬은 Cropper 단계(headroom)에서 결정되며 여기서는 항상 0.
"""

import logging
from pathlib import Path

import cv2
import numpy as np
from celery.exceptions import SoftTimeLimitExceeded
from PIL import Image

from headshot.constants import Pipeline
from headshot.services.detection import Detector, get_face_detection

logger = logging.getLogger(__name__)

BACKGROUND_COLOR = (255, 255, 255, 255)


class CenteringError(Exception):
    pass


def zoom_image(
    image: np.ndarray, zoom_factor: float, passes: int = Pipeline.ZOOM_PASSES
) -> np.ndarray:
    """zoom_factor 배율로 확대 (여러 단계 Lanczos)

    배율을 passes 단계로 나눠 순차 리샘플링하고, 마지막 단계는 최종 크기에 정확히 맞춤.
    """
    img_h, img_w = image.shape[:2]
    target_w = max(1, int(img_w * zoom_factor))
    target_h = max(1, int(img_h * zoom_factor))
    step = zoom_factor ** (1 / passes)

    zoomed = image
    for i in range(1, passes + 1):
        if i == passes:
            size = (target_w, target_h)
        else:
            size = (max(1, round(img_w * step**i)), max(1, round(img_h * step**i)))
        zoomed = cv2.resize(zoomed, size, interpolation=cv2.INTER_LANCZOS4)
    return zoomed


def find_face_center_x(gray: np.ndarray, detector: Detector) -> int | None:
    """가장 큰 얼굴의 중심 x 좌표. 얼굴이 없으면 None"""
    face = detector.detect(gray).largest()
    if face is None:
        return None
    return face.center_x


def translation_x(canvas_width: int, face_center_x: int) -> int:
    """얼굴 중심을 캔버스 가로 중앙에 맞추는 수평 이동량"""
    return canvas_width // 2 - face_center_x


def translate(image: np.ndarray, tx: int, canvas_width: int, canvas_height: int) -> np.ndarray:
    """수평 이동 affine 변환. 결과는 정확히 canvas 크기, 빈 영역은 투명(0)"""
    matrix = np.float32([[1, 0, tx], [0, 1, 0]])
    return cv2.warpAffine(
        image,
        matrix,
        (canvas_width, canvas_height),
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )


def is_clipped(image_width: int, tx: int, canvas_width: int) -> bool:
    """이동 후 이미지 가로 범위가 캔버스를 벗어나는지 (피사체 잘림 가능성)"""
    return tx < 0 or tx + image_width > canvas_width


def composite_on_white(
    image: Image.Image, canvas_width: int, canvas_height: int, target_dpi: int
) -> Image.Image:
    """불투명 흰 캔버스 위에 합성. 크기 차이만큼 중앙 정렬"""
    background = Image.new("RGBA", (canvas_width, canvas_height), BACKGROUND_COLOR)
    x = (canvas_width - image.width) // 2
    y = (canvas_height - image.height) // 2
    background.paste(image, (x, y), image)

    result = background.convert("RGB")
    background.close()
    result.info["dpi"] = (target_dpi, target_dpi)
    return result


def center_on_canvas(
    image: Image.Image,
    canvas_width: int,
    canvas_height: int,
    target_dpi: int,
    zoom: bool,
    zoom_factor: float,
    detect_face: bool,
    detector: Detector | None = None,
) -> Image.Image | None:
    """피사체를 고정 크기 캔버스 가로 중앙에 배치한 불투명 이미지 생성

    Args:
        image: Cropper 결과 (투명 배경 가능)
        canvas_width: 출력 너비
        canvas_height: 출력 높이
        target_dpi: 출력 DPI (info["dpi"]에 기록)
        zoom: True면 zoom_factor로 확대 후 처리
        zoom_factor: 확대 배율
        detect_face: True면 가장 큰 얼굴 기준, False면 이미지 중앙 기준
        detector: 얼굴 탐지기 (기본값 get_face_detection())

    Returns:
        canvas_width x canvas_height RGB 이미지.
        detect_face=True인데 얼굴이 없으면 None (수동 crop 필요)

    Raises:
        CenteringError: 확대/탐지/이동/합성 중 오류 (얼굴 미검출과 구분)
    """
    try:
        rgba = np.array(image.convert("RGBA"))

        if zoom:
            rgba = zoom_image(rgba, zoom_factor)

        img_w = rgba.shape[1]

        if detect_face:
            gray = cv2.cvtColor(rgba, cv2.COLOR_RGBA2GRAY)
            face_center_x = find_face_center_x(gray, detector or get_face_detection())
            if face_center_x is None:
                return None
        else:
            face_center_x = img_w // 2

        tx = translation_x(canvas_width, face_center_x)
        if is_clipped(img_w, tx, canvas_width):
            logger.warning(f"수평 이동으로 피사체가 잘릴 수 있음: tx={tx}, width={img_w}")

        warped = translate(rgba, tx, canvas_width, canvas_height)
        with Image.fromarray(warped) as centered:
            return composite_on_white(centered, canvas_width, canvas_height, target_dpi)

    except SoftTimeLimitExceeded:
        raise
    except Exception as e:
        logger.warning(f"얼굴 정렬 실패: {e}")
        raise CenteringError(f"정렬/합성 실패: {e}") from e


def save_derivative(image: Image.Image, path: Path, dpi: int, quality: int) -> None:
    """JPEG로 저장 (DPI 메타데이터 포함). 상위 디렉토리는 필요 시 생성

    Raises:
        OSError: 쓰기 실패 시
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="JPEG", quality=quality, dpi=(dpi, dpi))
