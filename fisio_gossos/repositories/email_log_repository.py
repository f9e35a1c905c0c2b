"""
EmailLog repository - joined log view, lookups and status aggregates.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import Select, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fisio_gossos.models.booking import Booking, Service
from fisio_gossos.models.email_log import EmailLog
from fisio_gossos.models.profile import Profile
from fisio_gossos.schemas.email_log import EmailLogFilters


def email_log_criteria(filters: EmailLogFilters) -> list[Any]:
    """Translate panel filters into WHERE predicates."""
    criteria = []
    if filters.status:
        criteria.append(EmailLog.status == filters.status)
    if filters.email_type:
        criteria.append(EmailLog.email_type == filters.email_type)
    if filters.recipient_email:
        criteria.append(EmailLog.recipient_email.ilike(f"%{filters.recipient_email}%"))
    if filters.start_date:
        criteria.append(EmailLog.created_at >= filters.start_date)
    if filters.end_date:
        criteria.append(EmailLog.created_at <= filters.end_date)
    return criteria


def build_email_log_query(filters: EmailLogFilters) -> Select:
    """
    Log rows joined with their booking (date, service name) and profile,
    newest first.
    """
    q = (
        select(
            EmailLog,
            Booking.fecha_hora.label("booking_fecha_hora"),
            Service.nombre.label("service_nombre"),
            Profile.nombre_completo.label("profile_nombre_completo"),
            Profile.email.label("profile_email"),
        )
        .outerjoin(Booking, EmailLog.booking_id == Booking.id)
        .outerjoin(Service, Booking.service_id == Service.id)
        .outerjoin(Profile, EmailLog.user_id == Profile.id)
        .order_by(desc(EmailLog.created_at))
    )
    criteria = email_log_criteria(filters)
    if criteria:
        q = q.where(*criteria)
    if filters.limit:
        q = q.limit(filters.limit)
    return q


def build_status_count_query(start: datetime, end: datetime) -> Select:
    return (
        select(EmailLog.status, func.count())
        .where(EmailLog.created_at >= start, EmailLog.created_at <= end)
        .group_by(EmailLog.status)
    )


class EmailLogRepository:
    """Read access to ``email_logs``; rows are written by the mail worker."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find(self, filters: EmailLogFilters) -> list[Any]:
        """Return result rows: ``(EmailLog, fecha_hora, service, name, email)``."""
        return list((await self._db.execute(build_email_log_query(filters))).all())

    async def get(self, log_id: UUID) -> Optional[EmailLog]:
        result = await self._db.execute(select(EmailLog).where(EmailLog.id == log_id))
        return result.scalar_one_or_none()

    async def count_by_status(self, start: datetime, end: datetime) -> dict[str, int]:
        result = await self._db.execute(build_status_count_query(start, end))
        return {row[0]: int(row[1]) for row in result.all()}
