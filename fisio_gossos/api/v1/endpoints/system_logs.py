"""
System log endpoints (super only): listing, export and cleanup.
"""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from fisio_gossos.core.config import settings
from fisio_gossos.core.dependencies import get_system_log_service, require_permissions
from fisio_gossos.core.rbac import Permission
from fisio_gossos.models.profile import Profile
from fisio_gossos.schemas.common import OperationResult, PaginationMeta
from fisio_gossos.schemas.system_log import (
    SystemLogFilters,
    SystemLogListResponse,
    SystemLogResponse,
)
from fisio_gossos.services.system_log_service import SystemLogService, SystemLogServiceError

router = APIRouter()

EXPORT_MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv; charset=utf-8",
}


def _raise_http_error(exc: SystemLogServiceError) -> None:
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


def _filters(
    start_date: Optional[datetime] = Query(default=None),
    end_date: Optional[datetime] = Query(default=None),
    user_email: Optional[str] = Query(default=None),
    error_type: Optional[str] = Query(default=None),
    component: Optional[str] = Query(default=None),
    error_code: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    limit: int = Query(default=settings.SYSTEM_LOGS_PAGE_LIMIT, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> SystemLogFilters:
    return SystemLogFilters(
        start_date=start_date,
        end_date=end_date,
        user_email=user_email,
        error_type=error_type,
        component=component,
        error_code=error_code,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.get("", response_model=SystemLogListResponse)
async def list_system_logs(
    filters: SystemLogFilters = Depends(_filters),
    _: Profile = Depends(require_permissions(Permission.SYSTEM_LOGS_READ)),
    service: SystemLogService = Depends(get_system_log_service),
) -> SystemLogListResponse:
    try:
        rows, total = await service.load_logs(filters)
    except SystemLogServiceError as exc:
        _raise_http_error(exc)

    return SystemLogListResponse(
        items=[SystemLogResponse.model_validate(row) for row in rows],
        pagination=PaginationMeta(total=total, offset=filters.offset, limit=filters.limit),
    )


@router.get("/export")
async def export_system_logs(
    export_format: Literal["json", "csv"] = Query(default="json", alias="format"),
    filters: SystemLogFilters = Depends(_filters),
    _: Profile = Depends(require_permissions(Permission.SYSTEM_LOGS_READ)),
    service: SystemLogService = Depends(get_system_log_service),
) -> Response:
    """
    Download the requested page of logs as a JSON or CSV attachment.
    """
    try:
        rows, _total = await service.load_logs(filters)
    except SystemLogServiceError as exc:
        _raise_http_error(exc)

    items = [SystemLogResponse.model_validate(row) for row in rows]
    if export_format == "csv":
        content = service.export_csv(items)
    else:
        content = service.export_json(items)

    filename = service.export_filename(export_format)
    return Response(
        content=content,
        media_type=EXPORT_MEDIA_TYPES[export_format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/{log_id}", response_model=OperationResult)
async def delete_system_log(
    log_id: int,
    _: Profile = Depends(require_permissions(Permission.SYSTEM_LOGS_MANAGE)),
    service: SystemLogService = Depends(get_system_log_service),
) -> OperationResult:
    return await service.delete_log(log_id)


@router.delete("", response_model=OperationResult)
async def clear_system_logs(
    _: Profile = Depends(require_permissions(Permission.SYSTEM_LOGS_MANAGE)),
    service: SystemLogService = Depends(get_system_log_service),
) -> OperationResult:
    """Remove every system log row."""
    return await service.clear_all_logs()
