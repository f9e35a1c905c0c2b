"""
ErrorLog repository - SQL access for the system log viewer.
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import Select, delete, desc, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fisio_gossos.models.error_log import ErrorLog
from fisio_gossos.schemas.system_log import SystemLogFilters


def system_log_criteria(filters: SystemLogFilters) -> list[Any]:
    """Translate viewer filters into WHERE predicates."""
    criteria = []
    if filters.start_date:
        criteria.append(ErrorLog.created_at >= filters.start_date)
    if filters.end_date:
        criteria.append(ErrorLog.created_at <= filters.end_date)
    if filters.user_email:
        criteria.append(ErrorLog.user_email.ilike(f"%{filters.user_email}%"))
    if filters.error_type:
        criteria.append(ErrorLog.error_type == filters.error_type)
    if filters.component:
        criteria.append(ErrorLog.component.ilike(f"%{filters.component}%"))
    if filters.error_code:
        criteria.append(ErrorLog.error_code == filters.error_code)
    if filters.search:
        term = f"%{filters.search}%"
        criteria.append(
            or_(
                ErrorLog.error_message.ilike(term),
                ErrorLog.component.ilike(term),
                ErrorLog.user_email.ilike(term),
            )
        )
    return criteria


def build_system_log_query(filters: SystemLogFilters) -> tuple[Select, Select]:
    criteria = system_log_criteria(filters)
    count_q = select(func.count()).select_from(ErrorLog)
    page_q = (
        select(ErrorLog)
        .order_by(desc(ErrorLog.created_at))
        .offset(filters.offset)
        .limit(filters.limit)
    )
    if criteria:
        count_q = count_q.where(*criteria)
        page_q = page_q.where(*criteria)
    return page_q, count_q


class SystemLogRepository:
    """Persistence for ``error_logs`` rows."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find(self, filters: SystemLogFilters) -> tuple[list[ErrorLog], int]:
        page_q, count_q = build_system_log_query(filters)
        total = int((await self._db.execute(count_q)).scalar_one())
        rows = list((await self._db.execute(page_q)).scalars().all())
        return rows, total

    async def insert(self, values: dict[str, Any]) -> ErrorLog:
        entry = ErrorLog(**values)
        self._db.add(entry)
        try:
            await self._db.commit()
        except SQLAlchemyError:
            await self._db.rollback()
            raise
        return entry

    async def delete(self, log_id: int) -> bool:
        stmt = delete(ErrorLog).where(ErrorLog.id == log_id).returning(ErrorLog.id)
        try:
            deleted = (await self._db.execute(stmt)).scalars().all()
            await self._db.commit()
        except SQLAlchemyError:
            await self._db.rollback()
            raise
        return bool(deleted)

    async def delete_all(self) -> int:
        """Unconditional bulk delete. Returns the number of rows removed."""
        try:
            result = await self._db.execute(delete(ErrorLog))
            await self._db.commit()
        except SQLAlchemyError:
            await self._db.rollback()
            raise
        return int(result.rowcount or 0)
