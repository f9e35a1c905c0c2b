"""
Celery tasks for transactional emails sent through Mailtrap.

``send_email`` is the only writer of email_logs: every attempt, successful
or not, leaves one row.
"""
from __future__ import annotations

import logging
from typing import Any

from fisio_gossos.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="fisio_gossos.workers.tasks.email_tasks.send_email",
    autoretry_for=(Exception,),
    max_retries=3,
    retry_backoff=True,
)
def send_email(payload: dict[str, Any]) -> dict:
    """
    Send one email.

    ``payload`` carries ``email_type``, ``to`` and optionally
    ``recipient_name``, ``subject``, ``language``, ``booking_id``,
    ``user_id``; every other key is template data.
    """
    from fisio_gossos.core.database_sync import get_sync_db
    from fisio_gossos.services.email_service import EmailService

    with get_sync_db() as db:
        svc = EmailService(db)
        if not svc.is_configured():
            logger.info("Email not configured, skipping %s for %s", payload.get("email_type"), payload.get("to"))
            svc.log_not_configured(payload)
            return {"status": "failed", "reason": "email_not_configured"}
        svc.send(payload)
        return {"status": "sent", "to": payload["to"]}
