"""
Blocking database access for the Celery workers.

Workers only append rows (one email_logs row per send attempt, one
error_logs row per failed task), so the pool stays small.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from fisio_gossos.core.config import settings

logger = logging.getLogger(__name__)

engine_sync = create_engine(
    settings.database_url_sync,
    echo=settings.SQL_ECHO,
    pool_size=settings.WORKER_DB_POOL_SIZE,
    max_overflow=0,
    pool_pre_ping=True,
    connect_args={"application_name": "fisio_gossos-worker"},
)

SyncSessionLocal = sessionmaker(bind=engine_sync, expire_on_commit=False, autoflush=False)


def reset_pool_after_fork() -> None:
    """Forget connections inherited from the parent worker process."""
    engine_sync.dispose(close=False)


@contextmanager
def get_sync_db() -> Iterator[Session]:
    """
    Worker unit of work: commit on a clean exit, roll back and re-raise otherwise.

    A row that must outlive the error (a failed send attempt) is committed
    by its writer before raising.
    """
    session = SyncSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        logger.warning("Worker session rolled back")
        session.rollback()
        raise
    finally:
        session.close()
