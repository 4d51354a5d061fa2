import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger import jsonlogger

# trace id of the HTTP request being served, set by the middleware in app.main
TRACE_ID_CTX: ContextVar[str] = ContextVar("trace_id", default=None)

# third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "uvicorn.access")


class TraceIdFilter(logging.Filter):
    def filter(self, record):
        record.trace_id = TRACE_ID_CTX.get(None)
        return True


class ServiceFilter(logging.Filter):
    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def filter(self, record):
        record.service = self.service
        return True


def resolve_level(level) -> int:
    """Numeric level for a name such as "debug"; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level=logging.INFO, service: str = "carpool-booking"):
    """Route every log record to stdout as one JSON object per line.

    Each record carries the service name and the current trace id, so booking
    transitions can be followed across a single HTTP request.
    """
    level = resolve_level(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s %(service)s %(trace_id)s")
    )
    handler.addFilter(TraceIdFilter())
    handler.addFilter(ServiceFilter(service))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
