"""
Structured Logging - Monitoring Layer

Every log line of the storage service carries the RPC request ID and the
peer address of the call that produced it. Output is one JSON object per
line in production and a compact text line elsewhere.

@.architecture
Incoming: app.py, api/dependencies.py, All modules via get_logger() --- {str log_level, str format_type, str request_id/client_addr, keyword fields}
Processing: configure_logging(), configure_from_preset(), JSONFormatter.format(), set_request_context() --- {3 jobs: context_injection, formatting, log_configuration}
Outgoing: sys.stdout, All modules --- {StructuredLogger instances, JSON or text log lines}
"""

import logging
import json
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO
from contextvars import ContextVar

# Set per RPC call by api/dependencies.py
request_id_ctx: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
client_addr_ctx: ContextVar[Optional[str]] = ContextVar('client_addr', default=None)

TEXT_FORMAT = '%(asctime)s %(levelname)-8s %(name)s [%(request_id)s %(client_addr)s] %(message)s'

# Client libraries that log every connection at DEBUG
QUIET_LOGGERS = ('httpx', 'httpcore', 'asyncio')


def _request_fields() -> Dict[str, str]:
    fields = {}
    if request_id_ctx.get():
        fields['request_id'] = request_id_ctx.get()
    if client_addr_ctx.get():
        fields['client_addr'] = client_addr_ctx.get()
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per record; keyword fields go under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'source': f"{record.module}:{record.lineno}",
            **_request_fields(),
        }

        if record.exc_info:
            exc_type, exc, tb = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc),
                'traceback': ''.join(traceback.format_exception(exc_type, exc, tb)),
            }

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            entry['extra'] = extra_fields

        return json.dumps(entry, default=str)


class ContextFilter(logging.Filter):
    """Fills ``request_id``/``client_addr`` for TEXT_FORMAT, '-' outside a call."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or '-'
        record.client_addr = client_addr_ctx.get() or '-'
        return True


class StructuredLogger:
    """
    Logger taking keyword fields, e.g.
    ``logger.info("File created", file_id=..., size_bytes=...)``.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, message: str, exc_info: bool = False, **fields: Any) -> None:
        extra = {'extra_fields': fields} if fields else None
        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    stream: Optional[TextIO] = None
) -> None:
    """
    Route all logging to a single stream handler.

    Args:
        level: Root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
        stream: Output stream (stdout if None)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    if format_type == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    handler.addFilter(ContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> StructuredLogger:
    """Get structured logger for module (usually ``__name__``)."""
    return StructuredLogger(name)


def set_request_context(
    request_id: Optional[str] = None,
    client_addr: Optional[str] = None
) -> None:
    """Bind request ID and peer address to the current call."""
    if request_id:
        request_id_ctx.set(request_id)
    if client_addr:
        client_addr_ctx.set(client_addr)


def clear_request_context() -> None:
    request_id_ctx.set(None)
    client_addr_ctx.set(None)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


# Per-environment defaults; production level/format come from settings
LOGGING_PRESETS = {
    'development': {'level': 'DEBUG', 'format_type': 'text'},
    'production': {'level': 'INFO', 'format_type': 'json'},
    'testing': {'level': 'WARNING', 'format_type': 'text'},
}


def configure_from_preset(preset: str = 'development', **overrides: Any) -> None:
    """
    Configure logging from a named preset.

    Args:
        preset: 'development', 'production' or 'testing'
        **overrides: configure_logging() arguments replacing preset values

    Raises:
        ValueError: If the preset is unknown
    """
    if preset not in LOGGING_PRESETS:
        raise ValueError(f"Unknown preset: {preset}. Available: {list(LOGGING_PRESETS)}")

    configure_logging(**{**LOGGING_PRESETS[preset], **overrides})
