"""
Logging for the AgenticVoice access-control service.

Every module logs through ``logging.getLogger(__name__)``. This module owns
the root configuration:

- JsonFormatter: one JSON object per line, for production log shipping
- ReadableFormatter: colored single-line output for local development
- ContextLogger: adapter stamping the request id and caller id on records
- AccessLogger: structured records of denials and role-change checks

The request id and caller id live in context variables set by the web
middleware and the auth dependency, so any log line emitted while serving a
request carries them.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Union
from pathlib import Path
from contextvars import ContextVar

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)

# Loggers that are too chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "httpx")


def _current_context() -> Dict[str, str]:
    context = {}
    request_id = request_id_var.get()
    if request_id:
        context["request_id"] = request_id
    user_id = user_id_var.get()
    if user_id:
        context["user_id"] = user_id
    return context


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(_current_context())
        entry.update(getattr(record, "extra_data", None) or {})

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ReadableFormatter(logging.Formatter):
    """Colored ``time LEVEL [logger] message | key=value`` lines."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self):
        super().__init__(datefmt='%H:%M:%S')

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        line = (
            f"{self.formatTime(record)} {color}{record.levelname:8s}{self.RESET} "
            f"[{record.name}] {record.getMessage()}"
        )

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            line += " | " + " ".join(f"{k}={v}" for k, v in extra_data.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter that attaches the request context and fixed fields to records.

    Fixed fields given to ``get_logger`` are merged under any ``extra_data``
    passed on the call itself.
    """

    def process(self, msg: str, kwargs: Dict) -> tuple:
        extra = dict(kwargs.get('extra') or {})
        extra.update(_current_context())
        extra['extra_data'] = {**self.extra, **extra.get('extra_data', {})}
        kwargs['extra'] = extra
        return msg, kwargs


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None
) -> None:
    """
    Replace the root handlers with this service's formatters.

    Args:
        level: Root log level
        json_output: Emit JSON lines on stdout instead of readable lines
        log_file: Also append JSON lines to this file
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter() if json_output else ReadableFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, **extra) -> ContextLogger:
    """Get a context-aware logger with optional fixed fields."""
    return ContextLogger(logging.getLogger(name), extra)


class AccessLogger:
    """
    Structured log of authorization outcomes.

    Denials go out at WARNING and role-change checks at INFO whatever the
    outcome, so the admin audit trail can be rebuilt from the logs.
    """

    def __init__(self, name: str = "access"):
        self.logger = get_logger(name)

    def log_denied(
        self,
        user_id: Optional[str],
        role: Optional[str],
        reason: Optional[str],
        path: Optional[str] = None,
        **data: Any,
    ) -> None:
        self.logger.warning(
            "Access denied",
            extra={'extra_data': {
                'actor_id': user_id,
                'actor_role': role,
                'reason': reason,
                'path': path,
                **data,
            }}
        )

    def log_role_change_check(
        self,
        user_id: Optional[str],
        actor_role: Optional[str],
        current_role: str,
        new_role: str,
        allowed: bool,
        target_user_id: Optional[str] = None,
    ) -> None:
        self.logger.info(
            "Role change checked",
            extra={'extra_data': {
                'actor_id': user_id,
                'actor_role': actor_role,
                'target_user_id': target_user_id,
                'current_role': current_role,
                'new_role': new_role,
                'allowed': allowed,
            }}
        )
