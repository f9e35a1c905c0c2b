"""
Pydantic schemas for the system (technical) error log viewer.
"""
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fisio_gossos.schemas.common import PaginationMeta, naive_utc


class SystemLogFilters(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    user_email: Optional[str] = None
    error_type: Optional[str] = None
    component: Optional[str] = None
    error_code: Optional[str] = None
    search: Optional[str] = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def _bounds_as_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class SystemLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    user_id: Optional[UUID]
    user_email: Optional[str]
    error_type: str
    error_code: Optional[str]
    error_message: str
    component: Optional[str]
    stack_trace: Optional[str]
    additional_data: Optional[dict[str, Any]]
    user_agent: Optional[str]


class SystemLogListResponse(BaseModel):
    items: list[SystemLogResponse]
    pagination: PaginationMeta
