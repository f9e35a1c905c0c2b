"""
Pydantic schemas for the email delivery log panel.
"""
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from fisio_gossos.schemas.common import naive_utc


class EmailLogFilters(BaseModel):
    status: Optional[str] = None
    email_type: Optional[str] = None
    recipient_email: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: Optional[int] = Field(default=None, ge=1, le=1000)

    @field_validator("start_date", "end_date")
    @classmethod
    def _bounds_as_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class EmailLogBooking(BaseModel):
    id: UUID
    fecha_hora: Optional[datetime] = None
    service_nombre: Optional[str] = None


class EmailLogProfile(BaseModel):
    nombre_completo: Optional[str] = None
    email: Optional[str] = None


class EmailLogItem(BaseModel):
    id: UUID
    created_at: datetime
    email_type: str
    status: str
    recipient_email: str
    recipient_name: Optional[str]
    subject: Optional[str]
    booking_id: Optional[UUID]
    user_id: Optional[UUID]
    language: Optional[str]
    email_data: Optional[dict[str, Any]]
    error_message: Optional[str]
    booking: Optional[EmailLogBooking] = None
    profile: Optional[EmailLogProfile] = None


class EmailLogListResponse(BaseModel):
    items: list[EmailLogItem]


class EmailStats(BaseModel):
    total_emails: int = 0
    total_sent: int = 0
    total_failed: int = 0
    total_pending: int = 0
    success_rate: float = 0.0
    days: int
