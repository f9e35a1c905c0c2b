"""
User-error endpoints: capture from the client shell and admin review.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from urllib.parse import urlparse
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from fisio_gossos.core.config import settings
from fisio_gossos.core.dependencies import (
    get_error_tracking_service,
    get_optional_user,
    require_permissions,
)
from fisio_gossos.core.rbac import Permission
from fisio_gossos.models.profile import Profile
from fisio_gossos.schemas.common import OperationResult, PaginationMeta
from fisio_gossos.schemas.user_error import (
    UserErrorCapture,
    UserErrorCaptureResponse,
    UserErrorFilters,
    UserErrorListResponse,
    UserErrorResponse,
    UserErrorStatusUpdate,
)
from fisio_gossos.services.error_tracking_service import (
    ErrorTrackingService,
    ErrorTrackingServiceError,
)

router = APIRouter()

LANGUAGE_COOKIE = "i18nextLng"


def _raise_http_error(exc: ErrorTrackingServiceError) -> None:
    """
    Convert domain error to HTTP response.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    if exc.code == "storage_error":
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif exc.code == "not_found":
        status_code = status.HTTP_404_NOT_FOUND
    elif exc.code == "validation_error":
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    raise HTTPException(status_code=status_code, detail=exc.detail) from exc


def _page_from_request(request: Request) -> Optional[str]:
    referer = request.headers.get("referer")
    if not referer:
        return None
    return urlparse(referer).path or "/"


@router.post(
    "/capture",
    response_model=UserErrorCaptureResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def capture_error(
    payload: UserErrorCapture,
    request: Request,
    current_user: Optional[Profile] = Depends(get_optional_user),
    service: ErrorTrackingService = Depends(get_error_tracking_service),
) -> UserErrorCaptureResponse:
    """
    Record an error the user saw. Always accepted; ``captured`` tells
    whether a row was written.
    """
    language = request.cookies.get(LANGUAGE_COOKIE)
    if current_user is not None and current_user.preferred_language:
        language = language or current_user.preferred_language

    captured = await service.capture_error(
        current_user,
        payload.message,
        payload.context,
        page=_page_from_request(request),
        user_agent=request.headers.get("user-agent"),
        language=language,
    )
    return UserErrorCaptureResponse(captured=captured)


@router.get("", response_model=UserErrorListResponse)
async def list_errors(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    user_email: Optional[str] = Query(default=None),
    user_role: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    limit: int = Query(default=settings.USER_ERRORS_PAGE_LIMIT, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    _: Profile = Depends(require_permissions(Permission.ERRORS_REVIEW)),
    service: ErrorTrackingService = Depends(get_error_tracking_service),
) -> UserErrorListResponse:
    """
    List captured errors, newest first.
    """
    filters = UserErrorFilters(
        status=status_filter,
        user_email=user_email,
        user_role=user_role,
        search=search,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    try:
        rows, total = await service.load_errors(filters)
    except ErrorTrackingServiceError as exc:
        _raise_http_error(exc)

    return UserErrorListResponse(
        items=[UserErrorResponse.model_validate(row) for row in rows],
        pagination=PaginationMeta(total=total, offset=offset, limit=limit),
    )


@router.patch("/{error_id}", response_model=OperationResult)
async def update_error_status(
    error_id: UUID,
    payload: UserErrorStatusUpdate,
    current_user: Profile = Depends(require_permissions(Permission.ERRORS_REVIEW)),
    service: ErrorTrackingService = Depends(get_error_tracking_service),
) -> OperationResult:
    return await service.update_error_status(
        error_id,
        payload.status,
        current_user,
        review_notes=payload.review_notes,
    )


@router.delete("/{error_id}", response_model=OperationResult)
async def delete_error(
    error_id: UUID,
    _: Profile = Depends(require_permissions(Permission.ERRORS_REVIEW)),
    service: ErrorTrackingService = Depends(get_error_tracking_service),
) -> OperationResult:
    return await service.delete_error(error_id)
