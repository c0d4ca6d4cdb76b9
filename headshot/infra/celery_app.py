from celery import Celery

from headshot.config import get_settings
from headshot.constants import TTL

settings = get_settings()

celery_app = Celery(
    "headshot",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    result_expires=TTL.CELERY_RESULT,
    imports=["headshot.infra.workers.batch_job"],
    worker_prefetch_multiplier=1,
)
