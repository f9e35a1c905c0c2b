"""
ErrorTrackingService - captures user-visible failures and supports their review.

Capture is best-effort: one insert per call, no retry, no queue. A failed
insert is logged and swallowed so reporting an error never breaks the
caller's own flow.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from fisio_gossos.core.config import settings
from fisio_gossos.core.rbac import UserRole
from fisio_gossos.models.profile import Profile
from fisio_gossos.models.user_error import UserError, UserErrorStatus
from fisio_gossos.repositories.user_error_repository import UserErrorRepository
from fisio_gossos.schemas.common import OperationResult
from fisio_gossos.schemas.user_error import UserErrorFilters

logger = logging.getLogger(__name__)

REVIEW_STATUSES = frozenset({UserErrorStatus.VALID.value, UserErrorStatus.NEEDS_REVIEW.value})

# Longer messages are cut; capture itself never rejects a payload
MAX_MESSAGE_LENGTH = 5000


class ErrorTrackingServiceError(Exception):
    """Domain error for user-error operations."""

    def __init__(self, detail: str, code: str = "error_tracking_error") -> None:
        self.detail = detail
        self.code = code
        super().__init__(detail)


def build_error_context(
    context: Optional[dict[str, Any]],
    *,
    page: Optional[str],
    language: Optional[str],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Base context (page, timestamp, language) overlaid with the caller's keys."""
    base: dict[str, Any] = {
        "page": page,
        "timestamp": (now or datetime.utcnow()).isoformat() + "Z",
        "language": language or settings.DEFAULT_LANGUAGE,
    }
    base.update(context or {})
    return base


class ErrorTrackingService:
    """Capture pipeline plus the admin review operations."""

    def __init__(self, repository: UserErrorRepository) -> None:
        self._repo = repository

    async def capture_error(
        self,
        user: Optional[Profile],
        message: Optional[str],
        context: Optional[dict[str, Any]] = None,
        *,
        page: Optional[str] = None,
        user_agent: Optional[str] = None,
        language: Optional[str] = None,
    ) -> bool:
        """
        Persist a ``pending`` UserError for the given user.

        Returns:
            True when a row was written. False for the silent no-op cases
            (no user, empty message) and for swallowed write failures.
        """
        if user is None or not message or not message.strip():
            return False

        values = {
            "user_id": user.id,
            "user_email": user.email,
            "user_role": user.role or UserRole.CLIENT.value,
            "error_message": message[:MAX_MESSAGE_LENGTH],
            "error_context": build_error_context(context, page=page, language=language),
            "user_agent": user_agent,
            "status": UserErrorStatus.PENDING.value,
        }

        try:
            await self._repo.insert(values)
        except Exception:
            logger.exception("Failed to store user error for %s", user.email)
            return False

        logger.info("User error captured for %s: %s", user.email, message)
        return True

    async def load_errors(self, filters: UserErrorFilters) -> tuple[list[UserError], int]:
        """Filtered page of errors, newest first, plus the unpaginated total."""
        try:
            return await self._repo.find(filters)
        except SQLAlchemyError as exc:
            logger.error("Error loading user errors: %s", exc)
            raise ErrorTrackingServiceError(
                "No se pudieron cargar los errores", code="storage_error"
            ) from exc

    async def update_error_status(
        self,
        error_id: UUID,
        status: str,
        reviewer: Profile,
        review_notes: str = "",
    ) -> OperationResult:
        """
        Record a review decision.

        Stamps reviewer identity and time. Repeating the call with the same
        arguments leaves the same status, notes and reviewer.
        """
        if status not in REVIEW_STATUSES:
            return OperationResult.fail(
                f"Estado no permitido: {status}", code="validation_error"
            )

        values = {
            "status": status,
            "reviewed_by": reviewer.id,
            "reviewed_at": datetime.utcnow(),
            "review_notes": review_notes or "",
        }
        try:
            updated = await self._repo.update(error_id, values)
        except SQLAlchemyError as exc:
            logger.error("Error updating error status %s: %s", error_id, exc)
            return OperationResult.fail(str(exc), code="storage_error")

        if not updated:
            return OperationResult.fail("No se encontró el registro", code="not_found")
        return OperationResult.ok(affected=1)

    async def delete_error(self, error_id: UUID) -> OperationResult:
        """Hard delete; an unknown id is reported, not raised."""
        try:
            deleted = await self._repo.delete(error_id)
        except SQLAlchemyError as exc:
            logger.error("Error deleting user error %s: %s", error_id, exc)
            return OperationResult.fail(str(exc), code="storage_error")

        if not deleted:
            logger.warning("No user error deleted for id %s", error_id)
            return OperationResult.fail("No se encontró el registro", code="not_found")
        return OperationResult.ok(affected=1)
