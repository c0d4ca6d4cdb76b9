"""Detection 스키마"""

from typing import Self

from pydantic import BaseModel, model_validator

from headshot.schemas.pipeline import BBox


class DetectionResult(BaseModel):
    """탐지 결과

    모든 좌표는 입력 이미지 기준 px.
    scores는 boxes와 같은 순서의 면적 점수 (예: 윤곽 내부 면적).
    비어 있으면 박스 면적으로 순위를 매김.
    """

    boxes: list[BBox] = []
    scores: list[float] = []

    @model_validator(mode="after")
    def validate_scores(self) -> Self:
        if self.scores and len(self.scores) != len(self.boxes):
            raise ValueError(
                f"scores 길이 불일치: boxes={len(self.boxes)}, scores={len(self.scores)}"
            )
        return self

    def __len__(self) -> int:
        return len(self.boxes)

    def largest(self) -> BBox | None:
        """가장 큰 후보 반환 (동점이면 먼저 탐지된 것)"""
        if not self.boxes:
            return None
        if self.scores:
            best = max(range(len(self.boxes)), key=lambda i: self.scores[i])
            return self.boxes[best]
        return max(self.boxes, key=lambda b: b.area)
