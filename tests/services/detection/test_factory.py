"""Detection 팩토리 테스트"""

from unittest.mock import patch

import pytest

from headshot.services.detection import DetectionError, get_face_detection, set_face_detection
from headshot.services.detection.haar import HaarCascadeDetector
from tests.conftest import FakeFaceDetector


class TestGetFaceDetection:
    def setup_method(self) -> None:
        set_face_detection(None)

    def teardown_method(self) -> None:
        set_face_detection(None)

    def test_default_returns_haar(self) -> None:
        backend = get_face_detection()
        assert isinstance(backend, HaarCascadeDetector)

    def test_cached(self) -> None:
        assert get_face_detection() is get_face_detection()

    def test_set_face_detection_overrides_factory(self) -> None:
        fake = FakeFaceDetector()
        set_face_detection(fake)
        assert get_face_detection() is fake

    def test_set_face_detection_none_resets(self) -> None:
        set_face_detection(FakeFaceDetector())
        set_face_detection(None)

        assert isinstance(get_face_detection(), HaarCascadeDetector)

    def test_unknown_provider_raises(self) -> None:
        with patch("headshot.services.detection.get_settings") as mock_settings:
            mock_settings.return_value.face_detection_provider = "unknown"
            with pytest.raises(ValueError, match="Unknown face detection provider"):
                get_face_detection()

    def test_yunet_missing_model_raises(self, tmp_path) -> None:
        with patch("headshot.services.detection.get_settings") as mock_settings:
            mock_settings.return_value.face_detection_provider = "yunet"
            mock_settings.return_value.yunet_model_path = str(tmp_path / "missing.onnx")
            mock_settings.return_value.yunet_score_threshold = 0.6
            with pytest.raises(DetectionError, match="YuNet"):
                get_face_detection()
