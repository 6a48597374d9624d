"""Celery application for background storage recalculation.

Start a worker and the nightly schedule with:
    celery -A celery_app worker --loglevel=info
    celery -A celery_app beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab

from config import get_settings

settings = get_settings()

celery_app = Celery(
    "studio_storage",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["storage_usage.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # A recalculation is idempotent, so a lost worker may safely rerun it
    task_acks_late=True,
)

celery_app.conf.beat_schedule = {
    'storage-recalculate-nightly': {
        'task': 'storage.recalculate_all',
        'schedule': crontab(hour=3, minute=0),  # 03:00 UTC
        'options': {
            'expires': 3600,
        },
    },
}
