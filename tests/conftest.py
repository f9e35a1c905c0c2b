"""
Pytest fixtures for backend API and service tests.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from fisio_gossos.api.v1.endpoints import auth as auth_endpoints
from fisio_gossos.core.database import get_db
from fisio_gossos.core.dependencies import (
    get_email_log_service,
    get_error_tracking_service,
    get_system_log_service,
)
from fisio_gossos.core.security import create_access_token
from fisio_gossos.main import app
from fisio_gossos.models.email_log import EmailLog
from fisio_gossos.models.error_log import ErrorLog
from fisio_gossos.models.profile import Profile
from fisio_gossos.models.user_error import UserError
from fisio_gossos.schemas.email_log import EmailLogFilters
from fisio_gossos.schemas.system_log import SystemLogFilters
from fisio_gossos.schemas.user_error import UserErrorFilters
from fisio_gossos.services.email_log_service import EmailLogService
from fisio_gossos.services.error_tracking_service import ErrorTrackingService
from fisio_gossos.services.system_log_service import SystemLogService


def storage_failure() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


# ---------------------------------------------------------------------------
# Fake async session (profiles only)
# ---------------------------------------------------------------------------

class FakeResult:
    """
    Minimal SQLAlchemy-like result object.
    """

    def __init__(self, profile: object | None = None) -> None:
        self._profile = profile

    def scalar_one_or_none(self) -> object | None:
        return self._profile


class InMemoryProfileStore:
    """
    Shared in-memory state used by fake DB sessions.
    """

    def __init__(self) -> None:
        self.by_email: dict[str, Profile] = {}
        self.by_id: dict[UUID, Profile] = {}
        self.commits = 0


class FakeDBSession:
    """
    Minimal async session resolving ``select(Profile).where(...)`` lookups.
    """

    def __init__(self, store: InMemoryProfileStore) -> None:
        self._store = store

    async def execute(self, statement: object) -> FakeResult:
        where_criteria = list(getattr(statement, "_where_criteria", []))
        if not where_criteria:
            return FakeResult(None)

        criterion = where_criteria[0]
        column_name = getattr(getattr(criterion, "left", None), "name", None)
        value = getattr(getattr(criterion, "right", None), "value", None)

        if column_name == "email":
            return FakeResult(self._store.by_email.get(str(value)))
        if column_name == "id":
            try:
                profile_id = value if isinstance(value, UUID) else UUID(str(value))
                return FakeResult(self._store.by_id.get(profile_id))
            except (TypeError, ValueError):
                return FakeResult(None)

        return FakeResult(None)

    def add(self, profile: Profile) -> None:
        if getattr(profile, "id", None) is None:
            profile.id = uuid4()

        now = datetime.utcnow()
        if getattr(profile, "created_at", None) is None:
            profile.created_at = now
        if getattr(profile, "updated_at", None) is None:
            profile.updated_at = now
        if getattr(profile, "is_active", None) is None:
            profile.is_active = True
        if getattr(profile, "role", None) is None:
            profile.role = "cliente"

        self._store.by_email[profile.email] = profile
        self._store.by_id[profile.id] = profile

    async def commit(self) -> None:
        self._store.commits += 1

    async def refresh(self, _profile: object) -> None:
        return None

    async def rollback(self) -> None:
        return None

    async def close(self) -> None:
        return None


# ---------------------------------------------------------------------------
# In-memory repositories
# ---------------------------------------------------------------------------

def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


class InMemoryUserErrorRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, UserError] = {}
        self.fail = False
        self.inserts = 0

    def _check(self) -> None:
        if self.fail:
            raise storage_failure()

    async def find(self, filters: UserErrorFilters) -> tuple[list[UserError], int]:
        self._check()
        rows = list(self.rows.values())
        if filters.status:
            rows = [r for r in rows if r.status == filters.status]
        if filters.user_email:
            rows = [r for r in rows if _contains(r.user_email, filters.user_email)]
        if filters.user_role:
            rows = [r for r in rows if r.user_role == filters.user_role]
        if filters.search:
            rows = [r for r in rows if _contains(r.error_message, filters.search)]
        if filters.start_date:
            rows = [r for r in rows if r.created_at >= filters.start_date]
        if filters.end_date:
            rows = [r for r in rows if r.created_at <= filters.end_date]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[filters.offset:filters.offset + filters.limit], len(rows)

    async def insert(self, values: dict[str, Any]) -> UserError:
        self._check()
        row = UserError(id=uuid4(), created_at=datetime.utcnow(), **values)
        self.rows[row.id] = row
        self.inserts += 1
        return row

    async def update(self, error_id: UUID, values: dict[str, Any]) -> bool:
        self._check()
        row = self.rows.get(error_id)
        if row is None:
            return False
        for key, value in values.items():
            setattr(row, key, value)
        return True

    async def delete(self, error_id: UUID) -> bool:
        self._check()
        return self.rows.pop(error_id, None) is not None


class InMemorySystemLogRepository:
    def __init__(self) -> None:
        self.rows: dict[int, ErrorLog] = {}
        self.fail = False
        self._next_id = 1

    def _check(self) -> None:
        if self.fail:
            raise storage_failure()

    async def find(self, filters: SystemLogFilters) -> tuple[list[ErrorLog], int]:
        self._check()
        rows = list(self.rows.values())
        if filters.error_type:
            rows = [r for r in rows if r.error_type == filters.error_type]
        if filters.search:
            rows = [
                r for r in rows
                if _contains(r.error_message, filters.search)
                or _contains(r.component, filters.search)
                or _contains(r.user_email, filters.search)
            ]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[filters.offset:filters.offset + filters.limit], len(rows)

    async def insert(self, values: dict[str, Any]) -> ErrorLog:
        self._check()
        row = ErrorLog(id=self._next_id, created_at=datetime.utcnow(), **values)
        self.rows[row.id] = row
        self._next_id += 1
        return row

    async def delete(self, log_id: int) -> bool:
        self._check()
        return self.rows.pop(log_id, None) is not None

    async def delete_all(self) -> int:
        self._check()
        removed = len(self.rows)
        self.rows.clear()
        return removed


class InMemoryEmailLogRepository:
    def __init__(self) -> None:
        self.rows: dict[UUID, EmailLog] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise storage_failure()

    def add(self, **values: Any) -> EmailLog:
        values.setdefault("id", uuid4())
        values.setdefault("created_at", datetime.utcnow())
        row = EmailLog(**values)
        self.rows[row.id] = row
        return row

    async def find(self, filters: EmailLogFilters) -> list[tuple]:
        self._check()
        rows = list(self.rows.values())
        if filters.status:
            rows = [r for r in rows if r.status == filters.status]
        if filters.email_type:
            rows = [r for r in rows if r.email_type == filters.email_type]
        if filters.recipient_email:
            rows = [r for r in rows if _contains(r.recipient_email, filters.recipient_email)]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        if filters.limit:
            rows = rows[:filters.limit]
        return [(r, None, None, None, None) for r in rows]

    async def get(self, log_id: UUID) -> Optional[EmailLog]:
        self._check()
        return self.rows.get(log_id)

    async def count_by_status(self, start: datetime, end: datetime) -> dict[str, int]:
        self._check()
        counts: dict[str, int] = {}
        for row in self.rows.values():
            if start <= row.created_at <= end:
                counts[row.status] = counts.get(row.status, 0) + 1
        return counts


class RecordingDispatcher:
    """Stands in for the Celery ``send_email.delay`` call."""

    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []
        self.error: Optional[Exception] = None

    def __call__(self, payload: dict[str, Any]) -> None:
        if self.error is not None:
            raise self.error
        self.payloads.append(payload)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def user_error_repo() -> InMemoryUserErrorRepository:
    return InMemoryUserErrorRepository()


@pytest.fixture
def system_log_repo() -> InMemorySystemLogRepository:
    return InMemorySystemLogRepository()


@pytest.fixture
def email_log_repo() -> InMemoryEmailLogRepository:
    return InMemoryEmailLogRepository()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def make_profile(profile_store: InMemoryProfileStore) -> Callable[..., Profile]:
    """Create a stored profile directly, bypassing registration."""

    def _make(
        role: str = "cliente",
        email: Optional[str] = None,
        **overrides: Any,
    ) -> Profile:
        profile = Profile(
            id=uuid4(),
            email=email or f"{role}-{uuid4().hex[:8]}@example.com",
            hashed_password="hashed::Secret123!",
            nombre_completo=overrides.pop("nombre_completo", "Test User"),
            telefono=overrides.pop("telefono", "612345678"),
            pais_codigo=overrides.pop("pais_codigo", "ES"),
            pais_nombre=overrides.pop("pais_nombre", "España"),
            role=role,
            preferred_language=overrides.pop("preferred_language", "ca"),
            is_active=overrides.pop("is_active", True),
            created_at=datetime.utcnow(),
            updated_at=datetime.utcnow(),
            **overrides,
        )
        FakeDBSession(profile_store).add(profile)
        return profile

    return _make


@pytest.fixture
def auth_headers() -> Callable[[Profile], dict[str, str]]:
    """Bearer header for a stored profile."""

    def _headers(profile: Profile) -> dict[str, str]:
        token = create_access_token(data={"sub": str(profile.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def client(
    profile_store: InMemoryProfileStore,
    user_error_repo: InMemoryUserErrorRepository,
    system_log_repo: InMemorySystemLogRepository,
    email_log_repo: InMemoryEmailLogRepository,
    dispatcher: RecordingDispatcher,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client with dependency overrides.
    """
    # Isolate tests from bcrypt backend differences in local environments.
    original_get_password_hash = auth_endpoints.get_password_hash
    original_verify_password = auth_endpoints.verify_password
    original_dispatch = auth_endpoints.dispatch_send_email
    auth_endpoints.get_password_hash = lambda password: f"hashed::{password}"
    auth_endpoints.verify_password = (
        lambda plain_password, hashed_password: hashed_password == f"hashed::{plain_password}"
    )
    auth_endpoints.dispatch_send_email = dispatcher

    async def override_get_db() -> AsyncGenerator[FakeDBSession, None]:
        yield FakeDBSession(profile_store)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_error_tracking_service] = (
        lambda: ErrorTrackingService(user_error_repo)
    )
    app.dependency_overrides[get_system_log_service] = (
        lambda: SystemLogService(system_log_repo)
    )
    app.dependency_overrides[get_email_log_service] = (
        lambda: EmailLogService(email_log_repo, dispatcher=dispatcher)
    )

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as async_client:
        yield async_client

    app.dependency_overrides.clear()
    auth_endpoints.get_password_hash = original_get_password_hash
    auth_endpoints.verify_password = original_verify_password
    auth_endpoints.dispatch_send_email = original_dispatch
