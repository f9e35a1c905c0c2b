"""
Authentication endpoints: register and login.
"""
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fisio_gossos.core.config import settings
from fisio_gossos.core.database import get_db
from fisio_gossos.core.rbac import UserRole
from fisio_gossos.core.security import create_access_token, get_password_hash, verify_password
from fisio_gossos.models.profile import Profile
from fisio_gossos.schemas.profile import LoginRequest, ProfileResponse, RegisterRequest, Token
from fisio_gossos.services.email_log_service import dispatch_send_email
from fisio_gossos.utils.phone_rules import get_country_by_code, validate_phone_number
from fisio_gossos.utils.validators import validate_email, validate_password

logger = logging.getLogger(__name__)

router = APIRouter()


def _unprocessable(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


def _check_registration(user_in: RegisterRequest) -> None:
    """Apply the form rules in display order; the first failure wins."""
    email_result = validate_email(user_in.email)
    if not email_result.is_valid:
        raise _unprocessable(email_result.first_error)

    if not user_in.nombre_completo or not user_in.nombre_completo.strip():
        raise _unprocessable("El nombre completo es obligatorio")

    phone_result = validate_phone_number(user_in.telefono, user_in.pais_codigo)
    if not phone_result.valid:
        raise _unprocessable(phone_result.message)

    if not validate_password(user_in.password).is_valid:
        raise _unprocessable("La contraseña no cumple los requisitos")

    if user_in.password != user_in.confirm_password:
        raise _unprocessable("Las contraseñas no coinciden")

    if user_in.preferred_language and user_in.preferred_language not in settings.SUPPORTED_LANGUAGES:
        raise _unprocessable(f"Idioma no soportado: {user_in.preferred_language}")


@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_in: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """
    Register a new client profile.

    Queues a welcome email; a queueing failure is logged and does not undo
    the registration.
    """
    _check_registration(user_in)

    email = user_in.email.strip().lower()
    result = await db.execute(select(Profile).where(Profile.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="El email ya está registrado",
        )

    country = get_country_by_code(user_in.pais_codigo)
    profile = Profile(
        email=email,
        hashed_password=get_password_hash(user_in.password),
        nombre_completo=user_in.nombre_completo.strip(),
        telefono=user_in.telefono,
        pais_codigo=country.code,
        pais_nombre=country.name,
        role=UserRole.CLIENT.value,
        preferred_language=user_in.preferred_language or settings.DEFAULT_LANGUAGE,
        email_notifications=user_in.email_notifications or email,
        is_active=True,
    )

    db.add(profile)
    await db.commit()
    await db.refresh(profile)

    try:
        dispatch_send_email(
            {
                "email_type": "welcome",
                "to": profile.email,
                "recipient_name": profile.nombre_completo,
                "language": profile.preferred_language,
                "user_id": str(profile.id),
            }
        )
    except Exception:
        logger.exception("Could not queue welcome email for %s", profile.email)

    return ProfileResponse.model_validate(profile)


@router.post("/login", response_model=Token)
async def login(
    login_request: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> Token:
    """
    Login with email/password (JSON body) and return a JWT access token.
    """
    stmt = select(Profile).where(Profile.email == login_request.email.strip().lower())
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_request.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    user.last_login_at = datetime.utcnow()
    await db.commit()

    access_token = create_access_token(data={"sub": str(user.id)})

    return Token(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
