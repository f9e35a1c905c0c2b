"""
Celery application factory.

Configures broker, backend, serialisation and time limits.
"""
from celery import Celery

from fisio_gossos.core.config import settings

celery_app = Celery("fisio_gossos")

celery_app.conf.update(
    # Broker / Backend
    broker_url=settings.CELERY_BROKER_URL,
    result_backend=settings.CELERY_RESULT_BACKEND,
    # Serialisation
    accept_content=["json"],
    task_serializer="json",
    result_serializer="json",
    # Timezone
    timezone="UTC",
    enable_utc=True,
    # Reliability
    broker_connection_retry_on_startup=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    # Limits
    task_soft_time_limit=settings.CELERY_TASK_SOFT_TIME_LIMIT,
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    # Results
    result_expires=3600,
)

# Task modules are registered explicitly
celery_app.conf.include = [
    "fisio_gossos.workers.tasks.email_tasks",
]

# Every mapper must be configured before a task touches the database
import fisio_gossos.models  # noqa: F401, E402

# Signal handlers that record task failures in error_logs
import fisio_gossos.workers.signals  # noqa: F401, E402
