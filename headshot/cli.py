"""헤드샷 산출물 일괄 생성 CLI

사용법:
    headshot ./photos
    headshot ./photos --output-dir ./out --no-face-detect --workers 4

종료 코드는 실패한 파일 수 (입력 폴더 오류는 1).
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from tqdm import tqdm

from headshot.config import get_settings
from headshot.services.batch import InputError, default_output_root, find_input_files, run_batch

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(processName)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class TqdmLoggingHandler(logging.Handler):
    """진행 바를 깨뜨리지 않도록 tqdm.write로 출력"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


def setup_logging(level: str | int = logging.INFO) -> None:
    handler = TqdmLoggingHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


class TqdmObserver:
    """파일 단위 진행 바. 상태 메시지 중 파일 완료 알림만 바를 전진시킴"""

    def __init__(self, bar: tqdm) -> None:
        self._bar = bar
        self._pending: str | None = None

    def current_file(self, name: str) -> None:
        self._pending = name
        self._bar.set_postfix_str(name)

    def status(self, message: str) -> None:
        if self._pending is not None:
            self._pending = None
            self._bar.update(1)
        else:
            tqdm.write(message)

    def image_progress(self, percent: int) -> None:
        pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="headshot",
        description="Generate fixed-size headshot derivatives from transparent PNG cutouts.",
    )
    parser.add_argument("input_dir", help="Folder containing transparent-background PNG images.")
    parser.add_argument(
        "-o",
        "--output-dir",
        help="Output root (default: <input_dir>/Output). One sub-folder is created per image.",
    )
    parser.add_argument(
        "--face-detect",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Center each derivative on the largest detected face (default: from settings).",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Number of worker processes (default: from settings, 1 = sequential).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(logging.DEBUG if args.verbose else settings.log_level.upper())

    face_detect = settings.face_detect if args.face_detect is None else args.face_detect
    workers = settings.max_workers if args.workers is None else args.workers
    if workers < 1:
        logger.error(f"--workers는 1 이상이어야 함: {workers}")
        return 1

    try:
        files = find_input_files(args.input_dir)
    except InputError as e:
        logger.error(e.message)
        return 1

    output_root = args.output_dir or default_output_root(args.input_dir)
    logger.info(f"입력 {len(files)}개, 출력 폴더: {output_root}")

    with tqdm(total=len(files), desc="Processing images", unit="file", ncols=100) as bar:
        summary = run_batch(
            files,
            output_root,
            detect_face=face_detect,
            observer=TqdmObserver(bar),
            max_workers=workers,
        )

    for report in summary.reports:
        if report.status == "failed":
            logger.error(f"실패: {report.name} ({report.error})")
        elif report.status == "partial":
            logger.warning(f"일부만 생성: {report.name} ({report.success_count}개)")

    return summary.failed


if __name__ == "__main__":
    sys.exit(main())
