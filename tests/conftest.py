from collections.abc import Generator
from pathlib import Path

import fakeredis
import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from headshot.infra.redis import set_redis
from headshot.main import app
from headshot.schemas.pipeline import BBox
from headshot.services.detection import DetectionResult, set_face_detection


def make_cutout(
    width: int = 200,
    height: int = 300,
    subject: tuple[int, int, int, int] | None = (50, 40, 100, 220),
) -> Image.Image:
    """투명 배경 + 불투명 직사각형 피사체 (x, y, w, h)"""
    img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    if subject is not None:
        x, y, w, h = subject
        draw = ImageDraw.Draw(img)
        draw.rectangle([x, y, x + w - 1, y + h - 1], fill=(200, 60, 40, 255))
    return img


def write_cutout(
    path: Path,
    width: int = 200,
    height: int = 300,
    subject: tuple[int, int, int, int] | None = (50, 40, 100, 220),
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    make_cutout(width, height, subject).save(path, format="PNG")
    return path


class FakeFaceDetector:
    """고정 박스를 반환하는 얼굴 탐지기. face=None이면 항상 미검출"""

    def __init__(self, face: BBox | None = None, hits: int | None = None) -> None:
        self.face = face
        self.hits = hits  # 처음 hits번만 검출, None이면 매번
        self.calls = 0

    def detect(self, image: np.ndarray) -> DetectionResult:
        self.calls += 1
        if self.face is None or (self.hits is not None and self.calls > self.hits):
            return DetectionResult()
        return DetectionResult(boxes=[self.face])


class RecordingObserver:
    def __init__(self) -> None:
        self.files: list[str] = []
        self.messages: list[str] = []
        self.progress: list[int] = []

    def current_file(self, name: str) -> None:
        self.files.append(name)

    def status(self, message: str) -> None:
        self.messages.append(message)

    def image_progress(self, percent: int) -> None:
        self.progress.append(percent)


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    """피사체가 있는 PNG 2장이 들어 있는 입력 폴더"""
    directory = tmp_path / "photos"
    write_cutout(directory / "alice.png")
    write_cutout(directory / "bob.png", subject=(20, 10, 160, 280))
    return directory


@pytest.fixture
def face_detector() -> Generator[FakeFaceDetector, None, None]:
    """이미지 좌상단 근처 얼굴을 반환하는 탐지기를 전역 백엔드로 설정"""
    detector = FakeFaceDetector(BBox(x=10, y=10, width=40, height=40))
    set_face_detection(detector)
    yield detector
    set_face_detection(None)


@pytest.fixture
def fake_redis() -> Generator[fakeredis.FakeRedis, None, None]:
    r = fakeredis.FakeRedis(decode_responses=True)
    set_redis(r)
    yield r
    set_redis(None)


@pytest.fixture
def client(fake_redis: fakeredis.FakeRedis) -> Generator[TestClient, None, None]:
    yield TestClient(app)
