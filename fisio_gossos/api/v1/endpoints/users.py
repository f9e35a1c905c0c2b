"""
Profile endpoints: own profile and language preference.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from fisio_gossos.core.database import get_db
from fisio_gossos.core.dependencies import require_permissions
from fisio_gossos.core.rbac import Permission
from fisio_gossos.models.profile import Profile
from fisio_gossos.schemas.profile import (
    LanguageResponse,
    LanguageUpdate,
    ProfileResponse,
    ProfileUpdate,
)
from fisio_gossos.services.language_service import LanguageService
from fisio_gossos.utils.phone_rules import get_country_by_code, validate_phone_number

router = APIRouter()

LANGUAGE_COOKIE = "i18nextLng"
LANGUAGE_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


def _raise_http_error(code: str | None, detail: str | None) -> None:
    status_code = status.HTTP_400_BAD_REQUEST
    if code == "storage_error":
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif code == "not_found":
        status_code = status.HTTP_404_NOT_FOUND
    elif code == "validation_error":
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    raise HTTPException(status_code=status_code, detail=detail)


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    current_user: Profile = Depends(require_permissions(Permission.PROFILE_READ_SELF)),
) -> ProfileResponse:
    """
    Get current authenticated profile.
    """
    return ProfileResponse.model_validate(current_user)


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    profile_update: ProfileUpdate,
    current_user: Profile = Depends(require_permissions(Permission.PROFILE_UPDATE_SELF)),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """
    Update own profile. Phone numbers are checked against the rules of the
    (new or current) country.
    """
    update_data = profile_update.model_dump(exclude_unset=True)

    if "nombre_completo" in update_data and not (update_data["nombre_completo"] or "").strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="El nombre completo es obligatorio",
        )

    if "telefono" in update_data or "pais_codigo" in update_data:
        country_code = update_data.get("pais_codigo") or current_user.pais_codigo
        phone = update_data.get("telefono", current_user.telefono)
        result = validate_phone_number(phone, country_code)
        if not result.valid:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=result.message,
            )
        country = get_country_by_code(country_code)
        update_data["pais_codigo"] = country.code
        update_data["pais_nombre"] = country.name

    for field, value in update_data.items():
        setattr(current_user, field, value)

    await db.commit()
    await db.refresh(current_user)
    return ProfileResponse.model_validate(current_user)


@router.get("/me/language", response_model=LanguageResponse)
async def get_my_language(
    current_user: Profile = Depends(require_permissions(Permission.PROFILE_READ_SELF)),
    db: AsyncSession = Depends(get_db),
) -> LanguageResponse:
    language = await LanguageService.load(db, current_user.id)
    return LanguageResponse(language=language)


@router.put("/me/language", response_model=LanguageResponse)
async def update_my_language(
    payload: LanguageUpdate,
    response: Response,
    current_user: Profile = Depends(require_permissions(Permission.PROFILE_UPDATE_SELF)),
    db: AsyncSession = Depends(get_db),
) -> LanguageResponse:
    """
    Persist the preferred language and mirror it into the ``i18nextLng``
    cookie that the client reads on startup.
    """
    result = await LanguageService.change_language(db, current_user, payload.language)
    if not result.success:
        _raise_http_error(result.code, result.error)

    response.set_cookie(
        LANGUAGE_COOKIE,
        payload.language,
        max_age=LANGUAGE_COOKIE_MAX_AGE,
        samesite="lax",
    )
    return LanguageResponse(language=payload.language)
