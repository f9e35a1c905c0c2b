"""
Celery signal handlers: task failures go to error_logs, plus worker
logging and per-process DB pool setup.

Imported by celery_app.py to register handlers on worker startup.
A handler never interferes with the task itself.
"""
from __future__ import annotations

import logging
import traceback as tb_module

from celery.signals import setup_logging as celery_setup_logging
from celery.signals import task_failure, worker_process_init

from fisio_gossos.core.logging_config import setup_logging

logger = logging.getLogger(__name__)

SENSITIVE_KEYWORDS = ("token", "key", "password", "secret")


def _sanitize(value: object, max_len: int = 500) -> str | None:
    """Stringify and truncate a value, masking obvious secrets."""
    if value is None:
        return None
    text = str(value)
    for keyword in SENSITIVE_KEYWORDS:
        if keyword in text.lower():
            text = "<redacted>"
            break
    return text[:max_len] if len(text) > max_len else text


@task_failure.connect
def on_task_failure(
    sender: object = None,
    task_id: str = "",
    exception: BaseException | None = None,
    args: tuple = (),
    kwargs: dict | None = None,
    **kw: object,
) -> None:
    """INSERT an error_logs row with the task name and traceback."""
    try:
        from fisio_gossos.core.database_sync import get_sync_db
        from fisio_gossos.models.error_log import ErrorLog

        task_name = sender.name if hasattr(sender, "name") else str(sender)
        stack_trace = None
        if exception is not None:
            stack_trace = "".join(
                tb_module.format_exception(type(exception), exception, exception.__traceback__)
            )[:2000]

        with get_sync_db() as db:
            db.add(
                ErrorLog(
                    error_type="CELERY_TASK_FAILURE",
                    error_message=str(exception) if exception is not None else "Task failed",
                    component=task_name,
                    stack_trace=stack_trace,
                    additional_data={
                        "task_id": task_id,
                        "args": _sanitize((args, kwargs or {})),
                    },
                )
            )

    except Exception:
        logger.warning("Could not record task_failure for %s: %s", task_id, tb_module.format_exc())


@celery_setup_logging.connect
def configure_worker_logging(**_: object) -> None:
    """Use the project's handlers instead of Celery's root logger setup."""
    setup_logging("worker")


@worker_process_init.connect
def reset_db_pool(**_: object) -> None:
    from fisio_gossos.core.database_sync import reset_pool_after_fork

    reset_pool_after_fork()
