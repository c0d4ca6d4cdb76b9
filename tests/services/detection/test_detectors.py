import numpy as np
import pytest
from pydantic import ValidationError

from headshot.schemas.pipeline import BBox
from headshot.services.detection import AlphaContourDetector, DetectionError, DetectionResult
from headshot.services.detection.haar import HaarCascadeDetector


class TestDetectionResult:
    def test_empty_largest_is_none(self) -> None:
        assert DetectionResult().largest() is None

    def test_largest_by_area_without_scores(self) -> None:
        small = BBox(x=0, y=0, width=10, height=10)
        big = BBox(x=50, y=50, width=30, height=30)

        assert DetectionResult(boxes=[small, big]).largest() == big

    def test_largest_by_score(self) -> None:
        wide = BBox(x=0, y=0, width=100, height=100)
        dense = BBox(x=0, y=0, width=50, height=50)

        # 바운딩 박스는 더 커도 윤곽 면적이 작으면 밀림
        result = DetectionResult(boxes=[wide, dense], scores=[100.0, 2000.0])
        assert result.largest() == dense

    def test_tie_keeps_first(self) -> None:
        first = BBox(x=0, y=0, width=10, height=10)
        second = BBox(x=20, y=0, width=10, height=10)

        assert DetectionResult(boxes=[first, second]).largest() == first

    def test_scores_length_mismatch_raises(self) -> None:
        with pytest.raises(ValidationError, match="scores"):
            DetectionResult(boxes=[BBox(x=0, y=0, width=1, height=1)], scores=[1.0, 2.0])


class TestAlphaContourDetector:
    def test_finds_each_blob(self) -> None:
        mask = np.zeros((100, 100), dtype=np.uint8)
        mask[10:40, 20:60] = 255
        mask[70:80, 70:80] = 255

        result = AlphaContourDetector().detect(mask)

        assert len(result) == 2
        assert result.largest() == BBox(x=20, y=10, width=40, height=30)

    def test_nested_blob_ignored(self) -> None:
        mask = np.zeros((100, 100), dtype=np.uint8)
        mask[10:90, 10:90] = 255
        mask[40:60, 40:60] = 0
        mask[45:55, 45:55] = 255

        result = AlphaContourDetector().detect(mask)

        assert len(result) == 1

    def test_empty_mask(self) -> None:
        result = AlphaContourDetector().detect(np.zeros((10, 10), dtype=np.uint8))
        assert result.largest() is None

    def test_multichannel_raises(self) -> None:
        with pytest.raises(DetectionError):
            AlphaContourDetector().detect(np.zeros((10, 10, 3), dtype=np.uint8))


class TestHaarCascadeDetector:
    def test_blank_image_has_no_faces(self) -> None:
        gray = np.full((120, 120), 255, dtype=np.uint8)
        assert HaarCascadeDetector().detect(gray).largest() is None

    def test_invalid_cascade_raises(self, tmp_path) -> None:
        with pytest.raises(DetectionError, match="Haar cascade"):
            HaarCascadeDetector(cascade_path=str(tmp_path / "missing.xml"))

    def test_color_input_raises(self) -> None:
        with pytest.raises(DetectionError):
            HaarCascadeDetector().detect(np.zeros((50, 50, 3), dtype=np.uint8))
