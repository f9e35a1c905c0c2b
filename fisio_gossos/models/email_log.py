"""
EmailLog model - immutable record of every transactional email attempt.
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID as SQLAlchemyUUID
from sqlalchemy.orm import relationship

from fisio_gossos.core.database import Base


class EmailLog(Base):
    """
    Tracks every email sent (or attempted) by the system.

    Rows are only inserted; a resend writes a new row and leaves the
    failed original untouched.
    """

    __tablename__ = "email_logs"

    id = Column(SQLAlchemyUUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    email_type = Column(
        String(50),
        nullable=False,
        index=True,
        comment="welcome|booking_created|reminder_24h|booking_cancelled|...",
    )
    status = Column(
        String(20),
        nullable=False,
        index=True,
        comment="sent|failed|pending",
    )
    recipient_email = Column(String(255), nullable=False, index=True)
    recipient_name = Column(String(255), nullable=True)
    subject = Column(String(255), nullable=True)
    booking_id = Column(
        SQLAlchemyUUID(as_uuid=True),
        ForeignKey("bookings.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_id = Column(
        SQLAlchemyUUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    language = Column(String(5), nullable=True)
    email_data = Column(JSON, nullable=True, comment="Template variables used for the send")
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    booking = relationship("Booking", foreign_keys=[booking_id])
    profile = relationship("Profile", foreign_keys=[user_id])

    def __repr__(self) -> str:
        return (
            f"<EmailLog(id={self.id}, type='{self.email_type}', "
            f"to='{self.recipient_email}', status='{self.status}')>"
        )
