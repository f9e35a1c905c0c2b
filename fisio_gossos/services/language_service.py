"""
LanguageService - reads and stores a profile's preferred UI language.
"""
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fisio_gossos.core.config import settings
from fisio_gossos.models.profile import Profile
from fisio_gossos.schemas.common import OperationResult

logger = logging.getLogger(__name__)


class LanguageService:
    """The profile row is the source of truth for language."""

    @staticmethod
    def is_supported(language: Optional[str]) -> bool:
        return bool(language) and language in settings.SUPPORTED_LANGUAGES

    @staticmethod
    async def load(db: AsyncSession, profile_id: UUID) -> Optional[str]:
        """Stored preference, or None when unset or unreadable."""
        try:
            result = await db.execute(select(Profile).where(Profile.id == profile_id))
        except SQLAlchemyError as exc:
            logger.error("Error loading user language: %s", exc)
            return None
        profile = result.scalar_one_or_none()
        return profile.preferred_language if profile is not None else None

    @staticmethod
    async def change_language(db: AsyncSession, profile: Profile, language: str) -> OperationResult:
        if not LanguageService.is_supported(language):
            return OperationResult.fail(
                f"Idioma no soportado: {language}", code="validation_error"
            )

        if profile.preferred_language == language:
            return OperationResult.ok(affected=0)

        previous = profile.preferred_language
        profile.preferred_language = language
        try:
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            profile.preferred_language = previous
            logger.error("Error changing language: %s", exc)
            return OperationResult.fail(str(exc), code="storage_error")

        logger.info("Language of %s changed from %s to %s", profile.email, previous, language)
        return OperationResult.ok(affected=1)
