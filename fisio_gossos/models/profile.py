"""
Profile model - one row per registered account (clients and staff).
"""
from datetime import datetime
from uuid import uuid4
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.dialects.postgresql import UUID as SQLAlchemyUUID
from sqlalchemy.orm import relationship

from fisio_gossos.core.database import Base
from fisio_gossos.core.rbac import UserRole


class Profile(Base):
    """
    Account profile used for authentication, contact data and preferences.

    ``preferred_language`` is the authoritative language choice; any
    client-side copy is only a cache.
    """
    __tablename__ = "profiles"

    id = Column(SQLAlchemyUUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    nombre_completo = Column(String(255), nullable=True)

    # Contact
    telefono = Column(String(20), nullable=True)
    pais_codigo = Column(String(2), nullable=True, comment="ISO country code, e.g. ES")
    pais_nombre = Column(String(100), nullable=True)

    role = Column(
        String(20),
        default=UserRole.CLIENT.value,
        nullable=False,
        comment="cliente|admin|super",
    )

    # Preferences
    preferred_language = Column(String(5), nullable=True, comment="ca|es|en")
    email_notifications = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )
    last_login_at = Column(DateTime, nullable=True)

    bookings = relationship("Booking", back_populates="profile")

    def __repr__(self):
        return f"<Profile(id={self.id}, email='{self.email}', role='{self.role}')>"
