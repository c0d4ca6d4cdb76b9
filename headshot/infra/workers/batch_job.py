"""배치 처리 작업

Celery 워커에서 실행되는 백그라운드 태스크.
"""

import logging
from typing import Any

from celery.exceptions import SoftTimeLimitExceeded

from headshot.constants import Limits
from headshot.infra.celery_app import celery_app
from headshot.services.batch import InputError, find_input_files, run_batch
from headshot.services.batch_status import (
    RedisProgressObserver,
    finish_batch,
    is_cancel_requested,
    load_batch,
    update_batch,
)

logger = logging.getLogger(__name__)


def _fail(batch_id: str, message: str) -> dict[str, Any]:
    update_batch(batch_id, status="failed", error_message=message)
    return {"status": "failed", "error": message}


@celery_app.task(soft_time_limit=Limits.BATCH_SOFT_TIME_LIMIT, time_limit=Limits.BATCH_TIME_LIMIT)
def process_batch(batch_id: str) -> dict[str, Any]:
    """배치 처리 태스크

    prefork 워커 프로세스 안에서는 프로세스 풀을 만들 수 없으므로 항상 순차 처리.

    Timeout:
        - soft_time_limit: 1시간 (SoftTimeLimitExceeded 발생)
        - time_limit: 65분 (강제 종료)
    """
    metadata = load_batch(batch_id)
    if metadata is None:
        logger.error(f"[{batch_id}] 배치 메타데이터 없음")
        return {"status": "failed", "error": "배치를 찾을 수 없음"}

    logger.info(f"[{batch_id}] 배치 시작: {metadata.input_dir}")

    try:
        update_batch(batch_id, status="processing")
        files = find_input_files(metadata.input_dir)

        summary = run_batch(
            files,
            metadata.output_dir,
            detect_face=metadata.face_detect,
            observer=RedisProgressObserver(batch_id),
            should_cancel=lambda: is_cancel_requested(batch_id),
            max_workers=1,
        )
        finish_batch(batch_id, summary)

        status = "cancelled" if summary.cancelled else "completed"
        logger.info(f"[{batch_id}] 배치 종료: {status}")
        return {
            "status": status,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
        }

    except InputError as e:
        logger.error(f"[{batch_id}] 입력 오류: {e.message}")
        return _fail(batch_id, e.message)

    except SoftTimeLimitExceeded:
        logger.error(f"[{batch_id}] 시간 초과")
        return _fail(batch_id, "처리 시간 초과")

    except Exception as e:
        logger.exception(f"[{batch_id}] 예외 발생: {e}")
        return _fail(batch_id, str(e))
