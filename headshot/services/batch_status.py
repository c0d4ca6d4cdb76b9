"""배치 상태 서비스: Redis에 저장되는 배치 메타데이터 관리

API(생성/조회/취소)는 async, 워커에서 쓰는 상태 갱신은 sync.
"""

import json
import uuid
from datetime import UTC, datetime
from typing import Any, Literal, cast

from pydantic import BaseModel

from headshot.config import get_settings
from headshot.constants import TTL, BatchId, RedisPrefix
from headshot.infra.redis import get_redis
from headshot.schemas.base import BaseSchema
from headshot.schemas.pipeline import BatchSummary, ImageReport
from headshot.services.batch import default_output_root, find_input_files

BatchStatus = Literal["pending", "processing", "completed", "cancelled", "failed"]

FINISHED_STATUSES: frozenset[str] = frozenset({"completed", "cancelled", "failed"})


class BatchMetadata(BaseModel):
    """Redis에 저장되는 배치 메타데이터"""

    batch_id: str
    status: BatchStatus
    input_dir: str
    output_dir: str
    face_detect: bool
    total: int
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    current_file: str | None = None
    status_message: str | None = None
    image_progress: int = 0
    reports: list[ImageReport] = []
    created_at: str
    completed_at: str | None = None
    error_message: str | None = None


class BatchRequest(BaseSchema):
    """배치 생성 요청"""

    input_dir: str
    output_dir: str | None = None  # 없으면 <input_dir>/Output
    face_detect: bool | None = None  # 없으면 설정값


class BatchResponse(BaseSchema):
    """배치 상태 응답"""

    batch_id: str
    status: BatchStatus
    input_dir: str
    output_dir: str
    face_detect: bool
    total: int
    processed: int
    succeeded: int
    failed: int
    current_file: str | None = None
    status_message: str | None = None
    image_progress: int
    reports: list[ImageReport]
    created_at: str
    completed_at: str | None = None
    error_message: str | None = None


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _generate_batch_id() -> str:
    return f"{BatchId.PREFIX}{uuid.uuid4().hex[:8]}"


def _key(batch_id: str) -> str:
    return f"{RedisPrefix.BATCH}:{batch_id}"


def _cancel_key(batch_id: str) -> str:
    return f"{RedisPrefix.BATCH}:{batch_id}:{RedisPrefix.CANCEL}"


def _to_response(metadata: BatchMetadata) -> BatchResponse:
    return BatchResponse.model_validate(metadata.model_dump())


def load_batch(batch_id: str) -> BatchMetadata | None:
    data = get_redis().get(_key(batch_id))
    if data is None:
        return None
    return BatchMetadata.model_validate(json.loads(cast(str, data)))


def update_batch(batch_id: str, **changes: Any) -> bool:
    """메타데이터 일부 필드 갱신. 배치가 없으면 False"""
    metadata = load_batch(batch_id)
    if metadata is None:
        return False

    updated = metadata.model_copy(update=changes)
    if changes.get("status") in FINISHED_STATUSES:
        updated.completed_at = _now()

    get_redis().set(_key(batch_id), updated.model_dump_json(), keepttl=True)
    return True


def finish_batch(batch_id: str, summary: BatchSummary) -> bool:
    """배치 결과 요약을 메타데이터에 반영"""
    return update_batch(
        batch_id,
        status="cancelled" if summary.cancelled else "completed",
        processed=len(summary.reports),
        succeeded=summary.succeeded,
        failed=summary.failed,
        reports=summary.reports,
    )


def is_cancel_requested(batch_id: str) -> bool:
    return bool(get_redis().exists(_cancel_key(batch_id)))


async def create_batch(request: BatchRequest) -> BatchResponse:
    """배치 생성: 입력 폴더 검증 + 메타데이터 저장 (task 호출은 route에서)

    Raises:
        InputError: 입력 폴더가 없거나 PNG 파일이 없는 경우
    """
    files = find_input_files(request.input_dir)
    face_detect = request.face_detect
    if face_detect is None:
        face_detect = get_settings().face_detect

    metadata = BatchMetadata(
        batch_id=_generate_batch_id(),
        status="pending",
        input_dir=request.input_dir,
        output_dir=request.output_dir or str(default_output_root(request.input_dir)),
        face_detect=face_detect,
        total=len(files),
        created_at=_now(),
    )

    get_redis().set(_key(metadata.batch_id), metadata.model_dump_json(), ex=TTL.BATCH)
    return _to_response(metadata)


async def get_batch(batch_id: str) -> BatchResponse | None:
    """배치 조회"""
    metadata = load_batch(batch_id)
    if metadata is None:
        return None
    return _to_response(metadata)


async def request_cancel(batch_id: str) -> BatchResponse | None:
    """취소 플래그 설정. 워커가 파일/프리셋 사이에서 확인함"""
    metadata = load_batch(batch_id)
    if metadata is None:
        return None

    if metadata.status not in FINISHED_STATUSES:
        get_redis().set(_cancel_key(batch_id), "1", ex=TTL.BATCH)
    return _to_response(metadata)


class RedisProgressObserver:
    """진행 상황을 배치 메타데이터에 기록 (FE 폴링용)"""

    def __init__(self, batch_id: str) -> None:
        self._batch_id = batch_id
        self._started = 0

    def current_file(self, name: str) -> None:
        self._started += 1
        update_batch(
            self._batch_id,
            current_file=name,
            processed=self._started - 1,
            image_progress=0,
        )

    def status(self, message: str) -> None:
        update_batch(self._batch_id, status_message=message)

    def image_progress(self, percent: int) -> None:
        update_batch(self._batch_id, image_progress=percent)
