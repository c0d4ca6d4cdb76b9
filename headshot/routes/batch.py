"""Batch API 라우트

입력 폴더 단위 헤드샷 산출물 생성 엔드포인트.

NOTE: 오케스트레이션(service 호출 + task 트리거)을 Route에서 처리.
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, status

from headshot.constants import BatchId
from headshot.infra.workers.batch_job import process_batch
from headshot.services import batch_status as batch_service
from headshot.services.batch import InputError

router = APIRouter(prefix="/batch", tags=["batch"])
logger = logging.getLogger(__name__)


def _not_found(batch_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "code": "BATCH_NOT_FOUND",
            "message": f"배치 작업을 찾을 수 없습니다: {batch_id}",
        },
    )


@router.post(
    "",
    response_model=batch_service.BatchResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_batch(request: batch_service.BatchRequest) -> batch_service.BatchResponse:
    """입력 폴더 검증 후 배치 작업 생성 + 큐잉"""
    try:
        response = await batch_service.create_batch(request)
    except InputError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": e.code, "message": e.message},
        ) from None

    try:
        await asyncio.to_thread(process_batch.delay, response.batch_id)
    except Exception:
        logger.error(f"Celery 큐잉 실패: {response.batch_id}")
        try:
            batch_service.update_batch(
                response.batch_id, status="failed", error_message="작업 큐잉에 실패했습니다."
            )
        except Exception:
            logger.error(f"상태 업데이트 실패: {response.batch_id}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "code": "QUEUE_UNAVAILABLE",
                "message": "작업 큐가 일시적으로 사용할 수 없습니다",
            },
        ) from None

    return response


@router.get("/{batch_id}", response_model=batch_service.BatchResponse)
async def get_batch(batch_id: str) -> batch_service.BatchResponse:
    """배치 진행 상황/결과 조회"""
    if not BatchId.PATTERN.match(batch_id):
        raise _not_found(batch_id)

    result = await batch_service.get_batch(batch_id)
    if result is None:
        raise _not_found(batch_id)

    return result


@router.post("/{batch_id}/cancel", response_model=batch_service.BatchResponse)
async def cancel_batch(batch_id: str) -> batch_service.BatchResponse:
    """배치 취소 요청. 진행 중인 파일/프리셋 경계에서 중단됨"""
    if not BatchId.PATTERN.match(batch_id):
        raise _not_found(batch_id)

    result = await batch_service.request_cancel(batch_id)
    if result is None:
        raise _not_found(batch_id)

    return result
