"""
Database Models Package
SQLAlchemy ORM models for PostgreSQL.
"""

from fisio_gossos.models.profile import Profile
from fisio_gossos.models.booking import Booking, Service
from fisio_gossos.models.user_error import UserError, UserErrorStatus
from fisio_gossos.models.error_log import ErrorLog
from fisio_gossos.models.email_log import EmailLog

__all__ = [
    "Profile",
    "Service",
    "Booking",
    "UserError",
    "UserErrorStatus",
    "ErrorLog",
    "EmailLog",
]
