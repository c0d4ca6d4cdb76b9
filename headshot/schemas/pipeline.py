"""파이프라인 데이터 모델

SubjectLocator → Cropper → FaceCenterer → 저장 전체에서 사용하는 공통 스키마
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, computed_field


class BBox(BaseModel):
    """바운딩 박스 (x, y, width, height)

    모든 좌표는 해당 이미지 기준 정수 px.
    y는 headroom 보정으로 음수가 될 수 있으며, crop 전에 clip()으로 정리.
    """

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_rect(cls, rect: tuple[int, int, int, int] | list[int]) -> "BBox":
        """OpenCV (x, y, w, h) 에서 BBox 생성

        Raises:
            ValueError: 값 개수가 4개가 아닌 경우
        """
        if len(rect) != 4:
            raise ValueError(f"BBox requires 4 values, got {len(rect)}")
        x, y, w, h = (int(v) for v in rect)
        return cls(x=x, y=y, width=w, height=h)

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def center_x(self) -> int:
        return self.x + self.width // 2

    def offset(self, dx: int = 0, dy: int = 0) -> "BBox":
        return BBox(x=self.x + dx, y=self.y + dy, width=self.width, height=self.height)

    def clip(self, width: int, height: int) -> "BBox":
        """이미지 경계 [0, width] x [0, height] 내로 클리핑

        완전히 경계 밖이면 zero-area BBox 반환.
        """
        x1 = min(width, max(0, self.x))
        y1 = min(height, max(0, self.y))
        x2 = min(width, max(0, self.x + self.width))
        y2 = min(height, max(0, self.y + self.height))
        return BBox(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    def to_box(self) -> tuple[int, int, int, int]:
        """PIL crop용 (left, upper, right, lower)"""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def is_valid(self) -> bool:
        """유효한 영역인지 확인 (width > 0 and height > 0)"""
        return self.width > 0 and self.height > 0


class SizePreset(BaseModel):
    """산출물 규격 (캔버스 크기, DPI, 줌 배율, 파일 접미사)"""

    model_config = ConfigDict(frozen=True)

    name: str
    output_width: int
    output_height: int
    target_dpi: int
    zoom_factor: float
    suffix: str

    def output_filename(self, stem: str, extension: str) -> str:
        return f"{stem}_{self.suffix}.{extension}"


CUTOUT = SizePreset(
    name="cutout",
    output_width=2100,
    output_height=1800,
    target_dpi=300,
    zoom_factor=1.1,
    suffix="cutout",
)
PRINT_5X7 = SizePreset(
    name="print_5x7",
    output_width=1500,
    output_height=2100,
    target_dpi=300,
    zoom_factor=1.1,
    suffix="5x7",
)
ICON = SizePreset(
    name="icon",
    output_width=120,
    output_height=155,
    target_dpi=72,
    zoom_factor=1.2,
    suffix="icon",
)
WEB = SizePreset(
    name="web",
    output_width=300,
    output_height=420,
    target_dpi=72,
    zoom_factor=1.1,
    suffix="web",
)

SIZE_PRESETS: tuple[SizePreset, ...] = (CUTOUT, PRINT_5X7, ICON, WEB)


DerivativeStatus = Literal["written", "no_face", "crop_failed", "center_failed", "cancelled"]
ImageStatus = Literal["completed", "partial", "failed", "cancelled"]


class DerivativeResult(BaseModel):
    """프리셋 1개 처리 결과"""

    preset: str
    status: DerivativeStatus
    path: str | None = None
    message: str | None = None


class ImageReport(BaseModel):
    """원본 이미지 1장 처리 결과

    - completed: 모든 프리셋 저장
    - partial: 일부 프리셋만 저장 (얼굴 미검출 등)
    - failed: 파일 단위 중단 (디코딩 실패, 피사체 없음, I/O 오류)
    - cancelled: 프리셋 사이에서 취소됨
    """

    source: str
    output_dir: str
    status: ImageStatus
    derivatives: list[DerivativeResult] = []
    error: str | None = None

    @property
    def written(self) -> list[str]:
        return [d.path for d in self.derivatives if d.status == "written" and d.path]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success_count(self) -> int:
        return len(self.written)

    @property
    def name(self) -> str:
        return Path(self.source).name


class BatchSummary(BaseModel):
    """배치 전체 결과"""

    total: int
    succeeded: int = 0
    failed: int = 0
    cancelled: bool = False
    reports: list[ImageReport] = []
