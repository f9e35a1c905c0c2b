"""
Pydantic schemas shared across the admin panels.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Filter bounds as naive UTC, matching the naive UTC created_at columns.

    Clients send ISO strings with a ``Z`` or an offset; those are converted.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Pagination (reutilizable)
# ---------------------------------------------------------------------------

class PaginationMeta(BaseModel):
    total: int
    offset: int
    limit: int


# ---------------------------------------------------------------------------
# Mutation outcome
# ---------------------------------------------------------------------------

class OperationResult(BaseModel):
    """
    Outcome of a mutation that must never raise to the caller.

    ``code`` lets clients tell "not found" apart from a storage failure.
    """
    success: bool
    error: Optional[str] = None
    code: Optional[str] = None
    affected: Optional[int] = None

    @classmethod
    def ok(cls, affected: Optional[int] = None) -> "OperationResult":
        return cls(success=True, affected=affected)

    @classmethod
    def fail(cls, error: str, code: str) -> "OperationResult":
        return cls(success=False, error=error, code=code)
