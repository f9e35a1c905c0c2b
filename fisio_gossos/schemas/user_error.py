"""
Pydantic schemas for the user-error capture and review API.
"""
from datetime import datetime
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fisio_gossos.schemas.common import PaginationMeta, naive_utc


class UserErrorCapture(BaseModel):
    """Payload of the ``captureUserError`` signal."""
    message: Optional[str] = ""
    context: dict[str, Any] = Field(default_factory=dict)


class UserErrorCaptureResponse(BaseModel):
    captured: bool


class UserErrorFilters(BaseModel):
    status: Optional[str] = None
    user_email: Optional[str] = None
    user_role: Optional[str] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = Field(default=100, ge=1, le=500)
    offset: int = Field(default=0, ge=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def _bounds_as_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(value)


class UserErrorStatusUpdate(BaseModel):
    status: Literal["valid", "needs_review"]
    review_notes: str = Field(default="", max_length=5000)


class UserErrorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: Optional[UUID]
    user_email: Optional[str]
    user_role: Optional[str]
    error_message: str
    error_context: Optional[dict[str, Any]]
    user_agent: Optional[str]
    status: str
    reviewed_by: Optional[UUID]
    reviewed_at: Optional[datetime]
    review_notes: Optional[str]
    created_at: datetime


class UserErrorListResponse(BaseModel):
    items: list[UserErrorResponse]
    pagination: PaginationMeta
