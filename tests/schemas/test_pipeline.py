import pytest

from headshot.schemas.pipeline import (
    ICON,
    SIZE_PRESETS,
    BBox,
    DerivativeResult,
    ImageReport,
)


class TestBBox:
    def test_from_rect(self) -> None:
        assert BBox.from_rect((1, 2, 3, 4)) == BBox(x=1, y=2, width=3, height=4)

    def test_from_rect_wrong_length_raises(self) -> None:
        with pytest.raises(ValueError, match="4 values"):
            BBox.from_rect([1, 2, 3])

    def test_offset_allows_negative_y(self) -> None:
        box = BBox(x=10, y=20, width=30, height=40).offset(dy=-40)
        assert box == BBox(x=10, y=-20, width=30, height=40)

    def test_clip_inside(self) -> None:
        box = BBox(x=10, y=10, width=20, height=20)
        assert box.clip(100, 100) == box

    def test_clip_negative_origin(self) -> None:
        box = BBox(x=-5, y=-40, width=50, height=100).clip(100, 100)
        assert box == BBox(x=0, y=0, width=45, height=60)

    def test_clip_outside_is_empty(self) -> None:
        box = BBox(x=200, y=200, width=10, height=10).clip(100, 100)
        assert not box.is_valid()

    def test_center_and_area(self) -> None:
        box = BBox(x=10, y=0, width=21, height=10)
        assert box.center_x == 20
        assert box.area == 210


class TestSizePresets:
    def test_order_and_sizes(self) -> None:
        sizes = [(p.suffix, p.output_width, p.output_height, p.target_dpi) for p in SIZE_PRESETS]
        assert sizes == [
            ("cutout", 2100, 1800, 300),
            ("5x7", 1500, 2100, 300),
            ("icon", 120, 155, 72),
            ("web", 300, 420, 72),
        ]

    def test_zoom_factors(self) -> None:
        assert [p.zoom_factor for p in SIZE_PRESETS] == [1.1, 1.1, 1.2, 1.1]

    def test_output_filename(self) -> None:
        assert ICON.output_filename("alice", "jpg") == "alice_icon.jpg"


class TestImageReport:
    def test_success_count_counts_written_only(self) -> None:
        report = ImageReport(
            source="/in/alice.png",
            output_dir="/out/alice",
            status="partial",
            derivatives=[
                DerivativeResult(preset="cutout", status="written", path="/out/a_cutout.jpg"),
                DerivativeResult(preset="icon", status="no_face"),
            ],
        )

        assert report.success_count == 1
        assert report.written == ["/out/a_cutout.jpg"]
        assert report.name == "alice.png"
