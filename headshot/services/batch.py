"""배치 서비스: 입력 폴더의 PNG 전체를 파일 단위로 처리

파일 하나의 실패(디코딩, 피사체 없음, I/O)는 로그/리포트로 남기고 다음 파일로 진행.
배치 전체를 중단시키는 것은 입력 폴더 조회 실패뿐.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from pathlib import Path

from celery.exceptions import SoftTimeLimitExceeded

from headshot.config import get_settings
from headshot.constants import Messages, Pipeline
from headshot.schemas.pipeline import SIZE_PRESETS, BatchSummary, ImageReport, SizePreset
from headshot.services.detection import Detector
from headshot.services.pipeline import PipelineError, process_image
from headshot.services.progress import ProgressObserver, SafeObserver

logger = logging.getLogger(__name__)


class InputError(Exception):
    """입력 폴더 오류 (배치 시작 전)

    code로 원인 구분:
    - INPUT_DIR_NOT_FOUND: 폴더 없음 또는 접근 불가
    - NO_INPUT_FILES: PNG 파일 없음
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


def find_input_files(input_dir: str | Path) -> list[Path]:
    """입력 폴더의 PNG 파일 목록 (이름순)

    Raises:
        InputError: 폴더가 없거나 PNG 파일이 하나도 없는 경우
    """
    directory = Path(input_dir)
    if not directory.is_dir():
        raise InputError("INPUT_DIR_NOT_FOUND", f"입력 폴더를 찾을 수 없음: {directory}")

    try:
        files = sorted(
            p
            for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == Pipeline.INPUT_EXTENSION
        )
    except OSError as e:
        raise InputError(
            "INPUT_DIR_NOT_FOUND", f"입력 폴더에 접근할 수 없음: {directory} ({e})"
        ) from e

    if not files:
        raise InputError("NO_INPUT_FILES", Messages.NO_INPUT_FILES)
    return files


def default_output_root(input_dir: str | Path) -> Path:
    """<input_dir>/Output"""
    return Path(input_dir) / get_settings().output_dir_name


def output_dir_for(source: Path, output_root: str | Path) -> Path:
    """<output_root>/<파일명>/"""
    return Path(output_root) / source.stem


def _failed_report(source: Path, output_dir: Path, error: str) -> ImageReport:
    return ImageReport(
        source=str(source),
        output_dir=str(output_dir),
        status="failed",
        error=error,
    )


def process_file(
    source: Path,
    output_root: str | Path,
    detect_face: bool,
    presets: Sequence[SizePreset] = SIZE_PRESETS,
    observer: ProgressObserver | None = None,
    should_cancel: Callable[[], bool] | None = None,
    detector: Detector | None = None,
) -> ImageReport:
    """파일 1개 처리. 예외를 전파하지 않고 failed 리포트로 변환"""
    out_dir = output_dir_for(source, output_root)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        return process_image(
            source,
            out_dir,
            detect_face=detect_face,
            presets=presets,
            observer=observer,
            should_cancel=should_cancel,
            detector=detector,
        )
    except PipelineError as e:
        logger.warning(f"[{source.name}] {e}")
        return _failed_report(source, out_dir, str(e))
    except SoftTimeLimitExceeded:
        # 배치 전체 시간 초과는 파일 단위 실패가 아님
        raise
    except Exception as e:
        logger.exception(f"[{source.name}] 처리 실패: {e}")
        return _failed_report(source, out_dir, str(e))


def _record(summary: BatchSummary, report: ImageReport) -> None:
    summary.reports.append(report)
    if report.status in ("completed", "partial"):
        summary.succeeded += 1
    elif report.status == "failed":
        summary.failed += 1
    else:
        summary.cancelled = True


def _run_sequential(
    files: list[Path],
    output_root: str | Path,
    detect_face: bool,
    presets: Sequence[SizePreset],
    notifier: SafeObserver,
    should_cancel: Callable[[], bool] | None,
    detector: Detector | None,
    summary: BatchSummary,
) -> None:
    total = len(files)
    for index, source in enumerate(files, start=1):
        if should_cancel is not None and should_cancel():
            summary.cancelled = True
            return

        notifier.current_file(source.name)
        report = process_file(
            source,
            output_root,
            detect_face,
            presets=presets,
            observer=notifier,
            should_cancel=should_cancel,
            detector=detector,
        )
        _record(summary, report)
        notifier.status(Messages.PROCESSING.format(index=index, total=total))


def _run_parallel(
    files: list[Path],
    output_root: str | Path,
    detect_face: bool,
    presets: Sequence[SizePreset],
    notifier: SafeObserver,
    should_cancel: Callable[[], bool] | None,
    max_workers: int,
    summary: BatchSummary,
) -> None:
    """프로세스 풀로 파일 병렬 처리

    파일 간 공유 상태가 없으므로 안전. 워커 프로세스는 설정 기반 얼굴 탐지기를 각자 생성.
    current_file/status 알림은 완료 순서대로 전달됨.
    """
    total = len(files)
    with ProcessPoolExecutor(max_workers=min(max_workers, total)) as executor:
        futures: dict[Future[ImageReport], Path] = {
            executor.submit(process_file, source, output_root, detect_face, presets): source
            for source in files
        }
        for index, future in enumerate(as_completed(futures), start=1):
            source = futures[future]
            notifier.current_file(source.name)
            try:
                report = future.result()
            except Exception as e:
                logger.exception(f"[{source.name}] 워커 실패: {e}")
                report = _failed_report(source, output_dir_for(source, output_root), str(e))
            _record(summary, report)
            notifier.status(Messages.PROCESSING.format(index=index, total=total))

            if should_cancel is not None and should_cancel():
                summary.cancelled = True
                for pending in futures:
                    pending.cancel()
                break


def run_batch(
    input_files: Iterable[str | Path],
    output_root: str | Path,
    detect_face: bool,
    observer: ProgressObserver | None = None,
    should_cancel: Callable[[], bool] | None = None,
    max_workers: int = 1,
    presets: Sequence[SizePreset] = SIZE_PRESETS,
    detector: Detector | None = None,
) -> BatchSummary:
    """파일 목록을 순서대로 처리하고 결과 요약 반환

    Args:
        input_files: 원본 PNG 경로 목록
        output_root: 산출물 루트 (파일마다 <output_root>/<파일명>/ 생성)
        detect_face: 배치 전체에 적용되는 얼굴 탐지 토글
        observer: 진행 상황 수신 (현재 파일, 상태 메시지, 이미지 진행률)
        should_cancel: 파일 사이/프리셋 사이에서 확인하는 취소 플래그
        max_workers: 2 이상이면 프로세스 풀 병렬 처리 (detector 인자는 무시됨)
        presets: 적용할 프리셋
        detector: 얼굴 탐지기 (순차 처리 전용, 기본값 get_face_detection())

    Returns:
        BatchSummary: 파일별 리포트와 성공/실패 개수
    """
    files = [Path(f) for f in input_files]
    notifier = SafeObserver(observer)
    summary = BatchSummary(total=len(files))

    logger.info(f"배치 시작: {len(files)}개 파일, face_detect={detect_face}")

    if max_workers > 1 and len(files) > 1:
        _run_parallel(
            files, output_root, detect_face, presets, notifier, should_cancel, max_workers, summary
        )
    else:
        _run_sequential(
            files, output_root, detect_face, presets, notifier, should_cancel, detector, summary
        )

    processed = len(summary.reports)
    if summary.cancelled:
        notifier.status(Messages.CANCELLED.format(processed=processed, total=summary.total))
    else:
        notifier.status(Messages.COMPLETE.format(total=summary.total))

    logger.info(
        f"배치 종료: 성공 {summary.succeeded}, 실패 {summary.failed}, "
        f"처리 {processed}/{summary.total}"
    )
    return summary
