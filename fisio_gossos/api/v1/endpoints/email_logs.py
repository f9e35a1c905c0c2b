"""
Email log endpoints (admin/super): delivery listing, stats and retry.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from fisio_gossos.core.config import settings
from fisio_gossos.core.dependencies import get_email_log_service, require_permissions
from fisio_gossos.core.rbac import Permission
from fisio_gossos.models.profile import Profile
from fisio_gossos.schemas.common import OperationResult
from fisio_gossos.schemas.email_log import EmailLogFilters, EmailLogListResponse, EmailStats
from fisio_gossos.services.email_log_service import EmailLogService, EmailLogServiceError

router = APIRouter()


def _raise_http_error(exc: EmailLogServiceError) -> None:
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


@router.get("", response_model=EmailLogListResponse)
async def list_email_logs(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    email_type: Optional[str] = Query(default=None),
    recipient_email: Optional[str] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    _: Profile = Depends(require_permissions(Permission.EMAIL_LOGS_READ)),
    service: EmailLogService = Depends(get_email_log_service),
) -> EmailLogListResponse:
    """
    List email attempts with their booking and recipient profile, newest first.
    """
    filters = EmailLogFilters(
        status=status_filter,
        email_type=email_type,
        recipient_email=recipient_email,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    try:
        items = await service.load_logs(filters)
    except EmailLogServiceError as exc:
        _raise_http_error(exc)
    return EmailLogListResponse(items=items)


@router.get("/stats", response_model=EmailStats)
async def get_email_stats(
    days: int = Query(default=settings.EMAIL_STATS_DEFAULT_DAYS, ge=1, le=365),
    _: Profile = Depends(require_permissions(Permission.EMAIL_LOGS_READ)),
    service: EmailLogService = Depends(get_email_log_service),
) -> EmailStats:
    try:
        return await service.load_stats(days)
    except EmailLogServiceError as exc:
        _raise_http_error(exc)


@router.post("/{log_id}/retry", response_model=OperationResult)
async def retry_email(
    log_id: UUID,
    _: Profile = Depends(require_permissions(Permission.EMAIL_LOGS_RETRY)),
    service: EmailLogService = Depends(get_email_log_service),
) -> OperationResult:
    """
    Re-queue a failed email. The new attempt shows up as a new log row.
    """
    return await service.retry_failed_email(log_id)
