"""
EmailLogService - delivery log panel: joined listing, rolling stats and retry.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from fisio_gossos.models.email_log import EmailLog
from fisio_gossos.repositories.email_log_repository import EmailLogRepository
from fisio_gossos.schemas.common import OperationResult
from fisio_gossos.schemas.email_log import (
    EmailLogBooking,
    EmailLogFilters,
    EmailLogItem,
    EmailLogProfile,
    EmailStats,
)

logger = logging.getLogger(__name__)

EmailDispatcher = Callable[[dict[str, Any]], Any]


class EmailLogServiceError(Exception):
    """Domain error for email log operations."""

    def __init__(self, detail: str, code: str = "email_log_error") -> None:
        self.detail = detail
        self.code = code
        super().__init__(detail)


def dispatch_send_email(payload: dict[str, Any]) -> Any:
    """Queue the mail worker's send task."""
    from fisio_gossos.workers.tasks.email_tasks import send_email

    return send_email.delay(payload)


def compute_email_stats(counts: dict[str, int], days: int) -> EmailStats:
    """Aggregate per-status counts into the panel's summary."""
    total = sum(counts.values())
    sent = counts.get("sent", 0)
    success_rate = round(sent * 100 / total, 2) if total else 0.0
    return EmailStats(
        total_emails=total,
        total_sent=sent,
        total_failed=counts.get("failed", 0),
        total_pending=counts.get("pending", 0),
        success_rate=success_rate,
        days=days,
    )


def build_resend_payload(log: EmailLog) -> dict[str, Any]:
    """
    Rebuild the original send request from a log row.

    Template variables in ``email_data`` are spread last, matching how the
    first send was issued.
    """
    payload: dict[str, Any] = {
        "email_type": log.email_type,
        "to": log.recipient_email,
        "recipient_name": log.recipient_name,
        "subject": log.subject,
        "language": log.language,
        "booking_id": str(log.booking_id) if log.booking_id else None,
        "user_id": str(log.user_id) if log.user_id else None,
    }
    payload.update(log.email_data or {})
    return payload


def _to_item(row: Any) -> EmailLogItem:
    log: EmailLog = row[0]
    booking = None
    if log.booking_id is not None:
        booking = EmailLogBooking(
            id=log.booking_id,
            fecha_hora=row[1],
            service_nombre=row[2],
        )
    profile = None
    if log.user_id is not None:
        profile = EmailLogProfile(nombre_completo=row[3], email=row[4])
    return EmailLogItem(
        id=log.id,
        created_at=log.created_at,
        email_type=log.email_type,
        status=log.status,
        recipient_email=log.recipient_email,
        recipient_name=log.recipient_name,
        subject=log.subject,
        booking_id=log.booking_id,
        user_id=log.user_id,
        language=log.language,
        email_data=log.email_data,
        error_message=log.error_message,
        booking=booking,
        profile=profile,
    )


class EmailLogService:
    """Operations behind the admin email log panel."""

    def __init__(
        self,
        repository: EmailLogRepository,
        dispatcher: Optional[EmailDispatcher] = None,
    ) -> None:
        self._repo = repository
        self._dispatch = dispatcher or dispatch_send_email

    async def load_logs(self, filters: EmailLogFilters) -> list[EmailLogItem]:
        try:
            rows = await self._repo.find(filters)
        except SQLAlchemyError as exc:
            logger.error("Error loading email logs: %s", exc)
            raise EmailLogServiceError(
                "Error cargando logs de emails", code="storage_error"
            ) from exc
        return [_to_item(row) for row in rows]

    async def load_stats(self, days: int = 30, now: Optional[datetime] = None) -> EmailStats:
        """Counts by status over the last ``days`` days."""
        end = now or datetime.utcnow()
        start = end - timedelta(days=days)
        try:
            counts = await self._repo.count_by_status(start, end)
        except SQLAlchemyError as exc:
            logger.error("Error loading email stats: %s", exc)
            raise EmailLogServiceError(
                "Error cargando estadísticas de emails", code="storage_error"
            ) from exc
        return compute_email_stats(counts, days)

    async def retry_failed_email(self, log_id: UUID) -> OperationResult:
        """
        Re-send a failed email with its original payload.

        The failed row is left as is; the worker writes a new row for the
        new attempt. Concurrent retries are not deduplicated.
        """
        try:
            log = await self._repo.get(log_id)
        except SQLAlchemyError as exc:
            logger.error("Error reading email log %s: %s", log_id, exc)
            return OperationResult.fail(str(exc), code="storage_error")

        if log is None:
            return OperationResult.fail("No se encontró el registro", code="not_found")
        if log.status != "failed":
            return OperationResult.fail(
                "Solo se pueden reintentar emails fallidos", code="not_failed"
            )

        try:
            self._dispatch(build_resend_payload(log))
        except Exception as exc:
            logger.error("Error retrying email %s: %s", log_id, exc)
            return OperationResult.fail(str(exc), code="dispatch_error")

        logger.info("Email %s re-queued for %s", log_id, log.recipient_email)
        return OperationResult.ok()
