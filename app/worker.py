"""Celery app for scheduled marketplace jobs.

Start a worker with ``celery -A app.worker worker`` and the scheduler with
``celery -A app.worker beat``.
"""

from celery import Celery
from celery.schedules import crontab

from app.config import settings

celery_app = Celery(
    "kmer_stays",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    # Schedules are expressed in Cameroon local time
    timezone="Africa/Douala",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_soft_time_limit=240,
    task_time_limit=300,
    task_default_retry_delay=60,
    worker_prefetch_multiplier=1,
    result_expires=3600,
    beat_schedule={
        "send-review-requests": {
            "task": "app.tasks.send_review_requests",
            "schedule": crontab(hour=10, minute=0),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
