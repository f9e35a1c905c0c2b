"""
Service catalogue and booking models.

Only the columns the email-log view joins on are modelled here.
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID as SQLAlchemyUUID
from sqlalchemy.orm import relationship

from fisio_gossos.core.database import Base


class Service(Base):
    """A physiotherapy service offered to clients."""

    __tablename__ = "services"

    id = Column(SQLAlchemyUUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    nombre = Column(String(100), nullable=False)
    duracion_minutos = Column(Integer, nullable=False, default=60)
    precio = Column(Numeric(8, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, nombre='{self.nombre}')>"


class Booking(Base):
    """An appointment booked by a client for one of their dogs."""

    __tablename__ = "bookings"

    id = Column(SQLAlchemyUUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    user_id = Column(
        SQLAlchemyUUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service_id = Column(
        SQLAlchemyUUID(as_uuid=True),
        ForeignKey("services.id", ondelete="SET NULL"),
        nullable=True,
    )
    fecha_hora = Column(DateTime, nullable=False, index=True)
    estado = Column(
        String(20),
        nullable=False,
        default="pendiente",
        comment="pendiente|confirmada|completada|cancelada",
    )
    pet_name = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    profile = relationship("Profile", back_populates="bookings")
    service = relationship("Service")

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, fecha_hora={self.fecha_hora}, estado='{self.estado}')>"
