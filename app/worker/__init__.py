from celery import Celery

from app.config import settings

celery_app = Celery(
    "solarwise",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    task_ignore_result=True,
    task_always_eager=settings.celery_task_always_eager,
    broker_connection_retry_on_startup=True,
    include=["app.worker.tasks"],
)

celery_app.autodiscover_tasks(["app.worker"])
