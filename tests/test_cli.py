from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from headshot.cli import TqdmObserver, build_parser, main
from tests.conftest import write_cutout


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch("headshot.cli.setup_logging"):
        yield


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args(["photos"])

        assert args.input_dir == "photos"
        assert args.output_dir is None
        assert args.face_detect is None
        assert args.workers is None

    def test_no_face_detect(self) -> None:
        args = build_parser().parse_args(["photos", "--no-face-detect", "-w", "4"])

        assert args.face_detect is False
        assert args.workers == 4


class TestTqdmObserver:
    def test_advances_once_per_file(self) -> None:
        bar = MagicMock()
        observer = TqdmObserver(bar)

        observer.current_file("alice.png")
        observer.image_progress(50)
        observer.status("(1/1) Processing image...")

        bar.set_postfix_str.assert_called_once_with("alice.png")
        bar.update.assert_called_once_with(1)

    def test_terminal_message_written(self) -> None:
        bar = MagicMock()
        observer = TqdmObserver(bar)

        with patch("headshot.cli.tqdm") as mock_tqdm:
            observer.status("Processing complete! (1 images processed)")

        bar.update.assert_not_called()
        mock_tqdm.write.assert_called_once_with("Processing complete! (1 images processed)")


class TestMain:
    def test_success(self, input_dir: Path, tmp_path: Path) -> None:
        output_dir = tmp_path / "out"

        code = main([str(input_dir), "--output-dir", str(output_dir), "--no-face-detect"])

        assert code == 0
        assert sorted(p.name for p in (output_dir / "alice").iterdir()) == [
            "alice_5x7.jpg",
            "alice_cutout.jpg",
            "alice_icon.jpg",
            "alice_web.jpg",
        ]

    def test_default_output_dir(self, input_dir: Path) -> None:
        assert main([str(input_dir), "--no-face-detect"]) == 0
        assert (input_dir / "Output" / "bob" / "bob_cutout.jpg").exists()

    def test_exit_code_counts_failures(self, input_dir: Path) -> None:
        write_cutout(input_dir / "empty.png", subject=None)

        assert main([str(input_dir), "--no-face-detect"]) == 1

    def test_missing_input_dir(self, tmp_path: Path) -> None:
        assert main([str(tmp_path / "missing")]) == 1

    def test_invalid_workers(self, input_dir: Path) -> None:
        assert main([str(input_dir), "--workers", "0"]) == 1
