"""
Logging setup shared by the API process and the Celery workers.

Both log to stdout. With DEBUG on, each process also writes its own
rotating file (``<LOG_DIR>/api.log``, ``<LOG_DIR>/worker.log``) so mail
worker output does not interleave with request logs.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fisio_gossos.core.config import settings

ROTATE_BYTES = 5 * 1024 * 1024
ROTATE_KEEP = 5
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LINE_FORMAT = "%(asctime)s %(levelname)-8s [%(component)s] %(name)s: %(message)s"

# Load balancer and uptime checks hit these every few seconds
HEALTH_PATHS = frozenset({"/", "/health", "/api/v1/ping"})

QUIET_LOGGERS = {
    "api": ("httpcore", "httpx", "asyncio", "multipart"),
    "worker": ("urllib3", "kombu", "amqp", "celery.utils.functional"),
}


class ComponentFilter(logging.Filter):
    """Stamp every record with the process it came from."""

    def __init__(self, component: str) -> None:
        super().__init__()
        self.component = component

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = self.component
        return True


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for health checks."""

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        if isinstance(args, tuple) and len(args) >= 3:
            path = str(args[2]).split("?", 1)[0]
            return path not in HEALTH_PATHS
        return True


def _owned(handler: logging.Handler) -> bool:
    return any(isinstance(f, ComponentFilter) for f in handler.filters)


def setup_logging(component: str = "api") -> None:
    """
    Configure the root logger for ``component`` ("api" or "worker").

    Safe to call more than once; handlers are only installed the first time.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    if any(_owned(handler) for handler in root.handlers):
        return

    formatter = logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT)
    tag = ComponentFilter(component)

    stdout = logging.StreamHandler(sys.stdout)
    stdout.setFormatter(formatter)
    stdout.addFilter(tag)
    root.addHandler(stdout)

    if settings.DEBUG:
        log_file = Path(settings.LOG_DIR) / f"{component}.log"
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                log_file, maxBytes=ROTATE_BYTES, backupCount=ROTATE_KEEP, encoding="utf-8"
            )
        except OSError as exc:
            logging.getLogger(__name__).warning("No log file for %s: %s", component, exc)
        else:
            rotating.setFormatter(formatter)
            rotating.addFilter(tag)
            root.addHandler(rotating)

    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())
    for name in QUIET_LOGGERS.get(component, ()):
        logging.getLogger(name).setLevel(logging.WARNING)
