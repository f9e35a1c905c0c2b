"""
ErrorLog model - technical error records shown in the super-admin log viewer.
"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID as SQLAlchemyUUID

from fisio_gossos.core.database import Base


class ErrorLog(Base):
    """
    System error log entry.

    Read-only for the application apart from single delete and bulk clear.
    """

    __tablename__ = "error_logs"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    user_id = Column(SQLAlchemyUUID(as_uuid=True), nullable=True, index=True)
    user_email = Column(String(255), nullable=True, index=True)
    error_type = Column(String(50), nullable=False, index=True, comment="e.g. DATABASE_ERROR")
    error_code = Column(String(50), nullable=True, index=True)
    error_message = Column(Text, nullable=False)
    component = Column(String(255), nullable=True)
    stack_trace = Column(Text, nullable=True)
    additional_data = Column(JSON, nullable=True)
    user_agent = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ErrorLog(id={self.id}, type='{self.error_type}', component='{self.component}')>"
