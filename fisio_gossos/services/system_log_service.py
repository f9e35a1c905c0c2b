"""
SystemLogService - technical error log: recording, querying, cleanup and export.
"""
from __future__ import annotations

import csv
import io
import json
import logging
from datetime import datetime
from typing import Any, Iterable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from fisio_gossos.models.error_log import ErrorLog
from fisio_gossos.repositories.system_log_repository import SystemLogRepository
from fisio_gossos.schemas.common import OperationResult
from fisio_gossos.schemas.system_log import SystemLogFilters, SystemLogResponse

logger = logging.getLogger(__name__)

CSV_HEADERS = ["ID", "Fecha", "Usuario", "Tipo", "Código", "Mensaje", "Componente"]
EXPORT_FORMATS = ("json", "csv")


class SystemLogServiceError(Exception):
    """Domain error for system log operations."""

    def __init__(self, detail: str, code: str = "system_log_error") -> None:
        self.detail = detail
        self.code = code
        super().__init__(detail)


class SystemLogService:
    """Operations behind the super-admin log viewer."""

    def __init__(self, repository: SystemLogRepository) -> None:
        self._repo = repository

    async def log_error(
        self,
        *,
        error_type: str,
        error_message: str,
        component: Optional[str] = None,
        error_code: Optional[str] = None,
        stack_trace: Optional[str] = None,
        additional_data: Optional[dict[str, Any]] = None,
        user_id: Optional[UUID] = None,
        user_email: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[ErrorLog]:
        """
        Record a technical error. Never raises: a failure to log is itself
        only logged.
        """
        logger.error("Error logged [%s] %s: %s", error_type, component, error_message)
        try:
            return await self._repo.insert(
                {
                    "user_id": user_id,
                    "user_email": user_email,
                    "error_type": error_type,
                    "error_message": error_message,
                    "error_code": error_code,
                    "component": component,
                    "stack_trace": stack_trace,
                    "additional_data": additional_data,
                    "user_agent": user_agent,
                }
            )
        except Exception:
            logger.exception("Error logging system failed")
            return None

    async def load_logs(self, filters: SystemLogFilters) -> tuple[list[ErrorLog], int]:
        try:
            return await self._repo.find(filters)
        except SQLAlchemyError as exc:
            logger.error("Error loading logs: %s", exc)
            raise SystemLogServiceError(
                "Error cargando logs del sistema", code="storage_error"
            ) from exc

    async def delete_log(self, log_id: int) -> OperationResult:
        try:
            deleted = await self._repo.delete(log_id)
        except SQLAlchemyError as exc:
            logger.error("Error deleting log %s: %s", log_id, exc)
            return OperationResult.fail("Error eliminando log", code="storage_error")

        if not deleted:
            return OperationResult.fail("No se encontró el registro", code="not_found")
        return OperationResult.ok(affected=1)

    async def clear_all_logs(self) -> OperationResult:
        try:
            removed = await self._repo.delete_all()
        except SQLAlchemyError as exc:
            logger.error("Error clearing logs: %s", exc)
            return OperationResult.fail(
                "Error eliminando todos los logs", code="storage_error"
            )

        logger.info("Cleared %d system logs", removed)
        return OperationResult.ok(affected=removed)

    # ------------------------------------------------------------------
    # Export (pure, over the rows passed in)
    # ------------------------------------------------------------------

    @staticmethod
    def export_json(rows: Iterable[SystemLogResponse]) -> str:
        return json.dumps(
            [row.model_dump(mode="json") for row in rows],
            indent=2,
            ensure_ascii=False,
        )

    @staticmethod
    def export_csv(rows: Iterable[SystemLogResponse]) -> str:
        buffer = io.StringIO()
        # Header row is bare; every data cell is quoted
        buffer.write(",".join(CSV_HEADERS) + "\n")
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for row in rows:
            writer.writerow(
                [
                    row.id,
                    row.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                    row.user_email or "N/A",
                    row.error_type,
                    row.error_code or "N/A",
                    row.error_message,
                    row.component or "",
                ]
            )
        return buffer.getvalue()

    @staticmethod
    def export_filename(fmt: str, now: Optional[datetime] = None) -> str:
        stamp = (now or datetime.utcnow()).strftime("%Y-%m-%d-%H%M%S")
        return f"system-logs-{stamp}.{fmt}"
