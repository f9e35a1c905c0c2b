"""
UserError model - a user-visible failure captured from the UI, awaiting triage.
"""
from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID as SQLAlchemyUUID

from fisio_gossos.core.database import Base


class UserErrorStatus(str, Enum):
    PENDING = "pending"
    VALID = "valid"
    NEEDS_REVIEW = "needs_review"


class UserError(Base):
    """
    Captured user error.

    Rows start as ``pending`` and only a review action moves them to
    ``valid`` or ``needs_review``. There is no automatic expiry.
    """

    __tablename__ = "user_errors"

    id = Column(SQLAlchemyUUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    user_id = Column(
        SQLAlchemyUUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_email = Column(String(255), nullable=True, index=True)
    user_role = Column(String(20), nullable=True, index=True)
    error_message = Column(Text, nullable=False)
    error_context = Column(JSON, nullable=True, comment="page, timestamp, language + caller keys")
    user_agent = Column(Text, nullable=True)
    status = Column(
        String(20),
        nullable=False,
        default=UserErrorStatus.PENDING.value,
        index=True,
        comment="pending|valid|needs_review",
    )

    # Review
    reviewed_by = Column(
        SQLAlchemyUUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at = Column(DateTime, nullable=True)
    review_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<UserError(id={self.id}, status='{self.status}', user='{self.user_email}')>"
