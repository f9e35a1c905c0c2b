"""
LanguageService tests: validation, no-op changes and storage rollback.
"""
from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from fisio_gossos.services.language_service import LanguageService


class RecordingSession:
    def __init__(self, fail_commit: bool = False) -> None:
        self.fail_commit = fail_commit
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        if self.fail_commit:
            raise OperationalError("UPDATE profiles", {}, Exception("connection lost"))
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


@pytest.mark.parametrize(
    ("language", "expected"),
    [("ca", True), ("es", True), ("en", True), ("fr", False), ("", False), (None, False)],
)
def test_is_supported(language, expected) -> None:
    assert LanguageService.is_supported(language) is expected


@pytest.mark.asyncio
async def test_unsupported_language_is_rejected(make_profile) -> None:
    session = RecordingSession()
    profile = make_profile(preferred_language="ca")

    result = await LanguageService.change_language(session, profile, "de")

    assert result.success is False
    assert result.code == "validation_error"
    assert result.error == "Idioma no soportado: de"
    assert session.commits == 0


@pytest.mark.asyncio
async def test_same_language_does_not_write(make_profile) -> None:
    session = RecordingSession()
    profile = make_profile(preferred_language="es")

    result = await LanguageService.change_language(session, profile, "es")

    assert result.success is True
    assert result.affected == 0
    assert session.commits == 0


@pytest.mark.asyncio
async def test_change_commits_new_language(make_profile) -> None:
    session = RecordingSession()
    profile = make_profile(preferred_language="ca")

    result = await LanguageService.change_language(session, profile, "en")

    assert result.affected == 1
    assert profile.preferred_language == "en"
    assert session.commits == 1


@pytest.mark.asyncio
async def test_commit_failure_restores_previous_language(make_profile) -> None:
    session = RecordingSession(fail_commit=True)
    profile = make_profile(preferred_language="ca")

    result = await LanguageService.change_language(session, profile, "en")

    assert result.success is False
    assert result.code == "storage_error"
    assert profile.preferred_language == "ca"
    assert session.rollbacks == 1
