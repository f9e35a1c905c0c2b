"""
Pydantic schemas for registration, login and the profile API.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from fisio_gossos.core.rbac import UserRole


class RegisterRequest(BaseModel):
    """
    Schema for client registration.

    Email, phone and password rules are applied by the endpoint so the
    first violation can be reported verbatim.
    """
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=100)
    confirm_password: str = Field(..., max_length=100)
    nombre_completo: str = Field(..., max_length=255)
    telefono: str = Field(..., max_length=30)
    pais_codigo: str = Field(default="ES", min_length=2, max_length=2)
    email_notifications: Optional[str] = Field(None, max_length=255)
    preferred_language: Optional[str] = Field(None, max_length=5)


class ProfileUpdate(BaseModel):
    """Schema for updating one's own profile."""
    nombre_completo: Optional[str] = Field(None, max_length=255)
    telefono: Optional[str] = Field(None, max_length=30)
    pais_codigo: Optional[str] = Field(None, min_length=2, max_length=2)
    email_notifications: Optional[str] = Field(None, max_length=255)


class ProfileResponse(BaseModel):
    """
    Profile data in responses.

    NEVER include hashed_password.
    """
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    nombre_completo: Optional[str]
    telefono: Optional[str]
    pais_codigo: Optional[str]
    pais_nombre: Optional[str]
    role: UserRole = Field(description="cliente|admin|super")
    preferred_language: Optional[str]
    email_notifications: Optional[str]
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime]


class Token(BaseModel):
    """JWT token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(
        description="Access token expiration in seconds",
        default=3600,
    )


class LoginRequest(BaseModel):
    """Schema for login request."""
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=100)


class LanguageUpdate(BaseModel):
    language: str = Field(..., min_length=2, max_length=5)


class LanguageResponse(BaseModel):
    language: Optional[str]
