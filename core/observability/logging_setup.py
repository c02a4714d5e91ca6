"""
Bike Shop logging setup.

Standard-library logging with the current request id stamped on every
record. The id lives in a ContextVar so repositories, engine components
and exception handlers can log without passing it around.
"""
from __future__ import annotations
from contextvars import ContextVar
import logging
import os

_request_id: ContextVar[str] = ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


def get_request_id() -> str:
    """Return the request id bound to the current context."""
    return _request_id.get()


def bind_request_id(request_id: str):
    """Bind a request id to the current context. Returns the reset token."""
    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Attach `request_id` to each record so the format string can use it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once. Level defaults to LOG_LEVEL or INFO."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    root.setLevel(level_name)

    for handler in root.handlers:
        if getattr(handler, "_bike_shop", False):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())
    handler._bike_shop = True  # type: ignore[attr-defined]
    root.addHandler(handler)
