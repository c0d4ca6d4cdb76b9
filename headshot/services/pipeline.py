"""프리셋별 산출물 생성 파이프라인

Load → Resize(작업 해상도) → SubjectLocator(1회) → (Cropper → FaceCenterer → 저장) x 프리셋
피사체 위치는 모든 프리셋이 공유하므로 1회만 탐지.
"""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from headshot.config import get_settings
from headshot.constants import Messages, Pipeline
from headshot.schemas.pipeline import (
    SIZE_PRESETS,
    BBox,
    DerivativeResult,
    ImageReport,
    ImageStatus,
    SizePreset,
)
from headshot.services.centering import CenteringError, center_on_canvas, save_derivative
from headshot.services.cropper import crop_and_scale
from headshot.services.detection import Detector
from headshot.services.locator import locate_subject
from headshot.services.progress import ProgressObserver, SafeObserver
from headshot.services.resizer import scale_to_fit

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    pass


class ImageLoadError(PipelineError):
    pass


class SubjectNotFoundError(PipelineError):
    pass


def load_image(path: Path, working_size: int = Pipeline.WORKING_MAX_SIZE) -> Image.Image:
    """이미지를 읽어 working_size 박스에 맞게 리사이즈

    투명도가 있으면 RGBA, 없으면 RGB로 변환.

    Raises:
        ImageLoadError: 파일이 없거나 디코딩 실패 시
    """
    try:
        with Image.open(path) as img:
            img.load()
            mode = "RGBA" if img.has_transparency_data else "RGB"
            with img.convert(mode) as converted:
                return scale_to_fit(converted, working_size, working_size)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageLoadError(f"이미지를 읽을 수 없음: {path.name} ({e})") from e


def headroom_box(box: BBox) -> BBox:
    """피사체 박스 위쪽에 고정 여백 추가 (모든 프리셋 공통)"""
    return box.offset(dy=-Pipeline.HEADROOM_OFFSET)


def _image_status(results: list[DerivativeResult]) -> ImageStatus:
    statuses = {r.status for r in results}
    if "cancelled" in statuses:
        return "cancelled"
    if statuses == {"written"}:
        return "completed"
    if "written" in statuses:
        return "partial"
    return "failed"


def render_preset(
    working: Image.Image,
    person: BBox,
    preset: SizePreset,
    output_path: Path,
    detect_face: bool,
    zoom: bool = True,
    quality: int = 100,
    detector: Detector | None = None,
) -> DerivativeResult:
    """프리셋 1개 처리: Crop → Center → 저장

    Raises:
        OSError: 저장 실패 시
    """
    cutout = crop_and_scale(working, person, preset.output_height)
    if cutout is None:
        return DerivativeResult(preset=preset.name, status="crop_failed", message="Crop 실패")

    try:
        centered = center_on_canvas(
            cutout,
            preset.output_width,
            preset.output_height,
            preset.target_dpi,
            zoom=zoom,
            zoom_factor=preset.zoom_factor,
            detect_face=detect_face,
            detector=detector,
        )
    except CenteringError as e:
        return DerivativeResult(preset=preset.name, status="center_failed", message=str(e))
    finally:
        cutout.close()

    if centered is None:
        message = Messages.MANUAL_CROP.format(name=output_path.name)
        logger.warning(message)
        return DerivativeResult(preset=preset.name, status="no_face", message=message)

    try:
        save_derivative(centered, output_path, preset.target_dpi, quality)
    finally:
        centered.close()

    logger.info(f"저장 완료: {output_path}")
    return DerivativeResult(preset=preset.name, status="written", path=str(output_path))


def process_image(
    source_path: str | Path,
    output_dir: str | Path,
    detect_face: bool,
    presets: Sequence[SizePreset] = SIZE_PRESETS,
    observer: ProgressObserver | None = None,
    should_cancel: Callable[[], bool] | None = None,
    detector: Detector | None = None,
    zoom: bool = True,
    working_size: int = Pipeline.WORKING_MAX_SIZE,
) -> ImageReport:
    """원본 1장에서 프리셋별 산출물 생성

    얼굴 미검출은 해당 프리셋만 건너뛰고, 나머지 프리셋은 계속 처리.

    Args:
        source_path: 원본 PNG 경로
        output_dir: 산출물 디렉토리 (없으면 생성)
        detect_face: True면 얼굴 기준 정렬, False면 이미지 중앙 기준
        presets: 적용할 프리셋 (기본값 SIZE_PRESETS)
        observer: 이미지 진행률 수신
        should_cancel: 프리셋 사이에서 확인하는 취소 플래그
        detector: 얼굴 탐지기 (기본값 get_face_detection())

    Returns:
        ImageReport: 프리셋별 결과

    Raises:
        ImageLoadError: 이미지 로드 실패 시
        SubjectNotFoundError: 피사체 위치를 찾지 못한 경우 (산출물 없음)
        OSError: 저장 실패 시
    """
    source = Path(source_path)
    out_dir = Path(output_dir)
    notifier = SafeObserver(observer)
    quality = get_settings().jpeg_quality

    working = load_image(source, working_size)
    try:
        box = locate_subject(working)
        if box is None:
            raise SubjectNotFoundError(f"피사체를 찾을 수 없음: {source.name}")
        person = headroom_box(box)
        logger.info(f"[{source.name}] 피사체 위치: {box}")

        results: list[DerivativeResult] = []
        for i, preset in enumerate(presets, start=1):
            if should_cancel is not None and should_cancel():
                logger.info(f"[{source.name}] 취소됨: {preset.name}부터 건너뜀")
                results.extend(
                    DerivativeResult(preset=p.name, status="cancelled") for p in presets[i - 1 :]
                )
                break

            output_path = out_dir / preset.output_filename(source.stem, Pipeline.OUTPUT_EXTENSION)
            results.append(
                render_preset(
                    working,
                    person,
                    preset,
                    output_path,
                    detect_face=detect_face,
                    zoom=zoom,
                    quality=quality,
                    detector=detector,
                )
            )
            notifier.image_progress(i * 100 // len(presets))
    finally:
        working.close()

    status = _image_status(results)
    return ImageReport(
        source=str(source),
        output_dir=str(out_dir),
        status=status,
        derivatives=results,
        error="저장된 산출물 없음" if status == "failed" else None,
    )
