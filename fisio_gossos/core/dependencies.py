"""
FastAPI dependencies for auth, database, etc.
"""
from collections.abc import Callable
from typing import Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from fisio_gossos.core.database import get_db
from fisio_gossos.core.rbac import Permission, has_permission
from fisio_gossos.core.security import decode_token
from fisio_gossos.models.profile import Profile
from fisio_gossos.repositories.email_log_repository import EmailLogRepository
from fisio_gossos.repositories.system_log_repository import SystemLogRepository
from fisio_gossos.repositories.user_error_repository import UserErrorRepository
from fisio_gossos.services.email_log_service import EmailLogService
from fisio_gossos.services.error_tracking_service import ErrorTrackingService
from fisio_gossos.services.system_log_service import SystemLogService

# OAuth2 scheme for JWT bearer token
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


async def _load_profile_from_token(token: str, db: AsyncSession) -> Optional[Profile]:
    """Resolve the profile behind an access token, or None when it is unusable."""
    payload = decode_token(token)
    if payload is None or payload.get("type", "access") != "access":
        return None

    raw_user_id: Optional[str] = payload.get("sub")
    if raw_user_id is None:
        return None
    try:
        user_id = UUID(str(raw_user_id))
    except (TypeError, ValueError):
        return None

    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Profile:
    """
    Dependency to get the current authenticated profile.

    Raises:
        HTTPException: If token is invalid, profile not found or disabled

    Example:
        @app.get("/me")
        async def get_me(user: Profile = Depends(get_current_user)):
            return user
    """
    user = await _load_profile_from_token(credentials.credentials, db)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: AsyncSession = Depends(get_db),
) -> Optional[Profile]:
    """
    Like ``get_current_user`` but yields None instead of failing.

    Used by endpoints that must answer anonymous callers too
    (error capture no-ops without a user).
    """
    if credentials is None:
        return None
    user = await _load_profile_from_token(credentials.credentials, db)
    if user is None or not user.is_active:
        return None
    return user


def require_permissions(*required_permissions: Permission) -> Callable[..., Profile]:
    """
    Build dependency that requires one or more RBAC permissions.

    Args:
        required_permissions: Permissions required to access a route.

    Returns:
        FastAPI dependency that yields authenticated profile if authorized.
    """

    async def _permission_dependency(
        current_user: Profile = Depends(get_current_user),
    ) -> Profile:
        missing_permissions = [
            permission.value
            for permission in required_permissions
            if not has_permission(current_user.role, permission)
        ]

        if missing_permissions:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    "Insufficient permissions: "
                    + ", ".join(missing_permissions)
                ),
            )

        return current_user

    return _permission_dependency


# ---------------------------------------------------------------------------
# Service providers (overridden in tests)
# ---------------------------------------------------------------------------

def get_error_tracking_service(db: AsyncSession = Depends(get_db)) -> ErrorTrackingService:
    return ErrorTrackingService(UserErrorRepository(db))


def get_system_log_service(db: AsyncSession = Depends(get_db)) -> SystemLogService:
    return SystemLogService(SystemLogRepository(db))


def get_email_log_service(db: AsyncSession = Depends(get_db)) -> EmailLogService:
    return EmailLogService(EmailLogRepository(db))
