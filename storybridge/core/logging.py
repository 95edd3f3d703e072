"""JSON logging for StoryBridge.

Every record is written as one JSON object per line with the fields
timestamp, level, service, logger, module, correlation_id and message
(plus exception when one is attached).

The correlation id is request-scoped: the HTTP middleware binds the
X-Request-ID of the current request with correlation_scope(), and
CorrelationIdFilter copies it onto each record ("-" outside a request).

Handlers are attached to the "storybridge" logger; module loggers created
with logging.getLogger(__name__) inherit them. The level comes from the
STORYBRIDGE_LOG_LEVEL environment variable, else from settings.
"""

import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

SERVICE_NAME = "storybridge"
NO_CORRELATION_ID = "-"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """Bind correlation_id for the enclosed block, restoring the previous one after."""
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


class JSONFormatter(logging.Formatter):
    """Formats records as single-line JSON objects."""

    def __init__(self, service_name: str = SERVICE_NAME, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "module": record.module,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class CorrelationIdFilter(logging.Filter):
    """Stamps each record with the current correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


def get_log_level_from_env(service_prefix: str = "STORYBRIDGE", default: str = "INFO") -> int:
    """Level named by <PREFIX>_LOG_LEVEL, else default; unknown names mean INFO."""
    name = os.environ.get(f"{service_prefix}_LOG_LEVEL", default).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _json_handler(handler: logging.Handler, service_name: str) -> logging.Handler:
    handler.setFormatter(JSONFormatter(service_name=service_name))
    handler.addFilter(CorrelationIdFilter())
    return handler


def create_file_handler(
    log_file_path: str,
    service_name: str = SERVICE_NAME,
    max_bytes: int = 10_485_760,
    backup_count: int = 5,
) -> RotatingFileHandler:
    """Rotating JSON-lines file handler; parent directories are created."""
    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=log_file_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    _json_handler(handler, service_name)
    return handler


def setup_structured_logging(
    service_name: str = SERVICE_NAME,
    log_file_path: str | None = None,
    log_level: int | None = None,
) -> logging.Logger:
    """Replace the service logger's handlers with JSON stdout (and file) output.

    Args:
        service_name: Logger name and "service" field value
        log_file_path: Optional rotating log file; skipped with a warning
            when it cannot be written
        log_level: Level to apply (default: from STORYBRIDGE_LOG_LEVEL)

    Returns:
        The configured service logger
    """
    level = log_level if log_level is not None else get_log_level_from_env()

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False
    logger.addHandler(_json_handler(logging.StreamHandler(sys.stdout), service_name))

    if log_file_path:
        try:
            logger.addHandler(create_file_handler(log_file_path, service_name))
        except PermissionError:
            logger.warning("Cannot write to %s, file logging disabled", log_file_path)

    return logger
