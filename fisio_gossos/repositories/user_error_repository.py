"""
UserError repository - SQL access for the capture/review pipeline.
"""
from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import Select, delete, desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fisio_gossos.models.user_error import UserError
from fisio_gossos.schemas.user_error import UserErrorFilters


def user_error_criteria(filters: UserErrorFilters) -> list[Any]:
    """Translate review filters into WHERE predicates."""
    criteria = []
    if filters.status:
        criteria.append(UserError.status == filters.status)
    if filters.user_email:
        criteria.append(UserError.user_email.ilike(f"%{filters.user_email}%"))
    if filters.user_role:
        criteria.append(UserError.user_role == filters.user_role)
    if filters.search:
        criteria.append(UserError.error_message.ilike(f"%{filters.search}%"))
    if filters.start_date:
        criteria.append(UserError.created_at >= filters.start_date)
    if filters.end_date:
        criteria.append(UserError.created_at <= filters.end_date)
    return criteria


def build_user_error_query(filters: UserErrorFilters) -> tuple[Select, Select]:
    """
    Build the (page, count) statements for a filter set.

    The page is newest first; the count ignores offset/limit.
    """
    criteria = user_error_criteria(filters)
    count_q = select(func.count()).select_from(UserError)
    page_q = (
        select(UserError)
        .order_by(desc(UserError.created_at))
        .offset(filters.offset)
        .limit(filters.limit)
    )
    if criteria:
        count_q = count_q.where(*criteria)
        page_q = page_q.where(*criteria)
    return page_q, count_q


class UserErrorRepository:
    """Persistence for ``user_errors`` rows."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def find(self, filters: UserErrorFilters) -> tuple[list[UserError], int]:
        page_q, count_q = build_user_error_query(filters)
        total = int((await self._db.execute(count_q)).scalar_one())
        rows = list((await self._db.execute(page_q)).scalars().all())
        return rows, total

    async def insert(self, values: dict[str, Any]) -> UserError:
        entry = UserError(**values)
        self._db.add(entry)
        try:
            await self._db.commit()
        except SQLAlchemyError:
            await self._db.rollback()
            raise
        await self._db.refresh(entry)
        return entry

    async def update(self, error_id: UUID, values: dict[str, Any]) -> bool:
        """Apply ``values`` to one row. Returns False when no row matched."""
        stmt = (
            update(UserError)
            .where(UserError.id == error_id)
            .values(**values)
            .returning(UserError.id)
        )
        try:
            updated = (await self._db.execute(stmt)).scalars().all()
            await self._db.commit()
        except SQLAlchemyError:
            await self._db.rollback()
            raise
        return bool(updated)

    async def delete(self, error_id: UUID) -> bool:
        """Hard delete. Returns False when no row matched."""
        stmt = delete(UserError).where(UserError.id == error_id).returning(UserError.id)
        try:
            deleted = (await self._db.execute(stmt)).scalars().all()
            await self._db.commit()
        except SQLAlchemyError:
            await self._db.rollback()
            raise
        return bool(deleted)
