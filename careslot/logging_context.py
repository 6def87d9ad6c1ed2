"""Request ID logging context for tracing remote calls across modules.

Provides a request_id-aware logger that attaches a correlation ID to every
log message, making it easy to follow a single toggle or booking
submission from the optimistic update through to reconciliation.

Usage:
    from careslot.logging_context import get_request_logger, set_request_id

    set_request_id("like-r42-1a2b3c")
    logger = get_request_logger(__name__)
    logger.info("Dispatching toggle")  # record.request_id == "like-r42-1a2b3c"
"""

import logging
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


def new_request_id(prefix: str) -> str:
    """Generate and set a fresh correlation ID with a readable prefix."""
    request_id = f"{prefix}-{uuid.uuid4().hex[:6]}"
    _request_id.set(request_id)
    return request_id


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
