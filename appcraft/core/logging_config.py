"""
AppCraft - Logging Configuration

Every log line can be tied back to the inbound request that caused it
(request ID context variable) and, for outbound proxy attempts, to the
target URL and attempt number.

Production writes one JSON object per line; other environments write a
readable line with the same context folded in.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from appcraft.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')

# Attributes every LogRecord carries; anything else was passed via extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {'message', 'asctime', 'request_id', 'proxy_context'}

DEV_FORMAT = "%(asctime)s | %(levelname)-8s | [%(request_id)s]%(proxy_context)s %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def get_request_id() -> str:
    return request_id_var.get() or ''


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def generate_request_id() -> str:
    """Short random ID used when the caller sends no X-Request-ID"""
    return uuid.uuid4().hex[:8]


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith('_')
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record: core fields, request ID, extras, exception"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.lineno}",
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        entry.update(record_extras(record))

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """
    Readable formatter exposing two extra placeholders:

        %(request_id)s     inbound request ID, or "-"
        %(proxy_context)s  " attempt=N target=URL" on proxy attempt records,
                           empty otherwise
    """

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or '-'

        parts = []
        attempt = getattr(record, 'attempt', None)
        if attempt is not None:
            parts.append(f"attempt={attempt}")
        target_url = getattr(record, 'target_url', None)
        if target_url:
            parts.append(f"target={target_url}")
        record.proxy_context = "".join(f" {part}" for part in parts)

        return super().format(record)


class AppCraftLogger(logging.Logger):
    """
    Logger with structured helpers. Each helper sets ``event_type`` so
    JSON output can be filtered per kind of event.
    """

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        self.info(
            f"HTTP {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": duration_ms,
                **kwargs
            }
        )

    def log_proxy_attempt(self, method: str, url: str, attempt: int,
                          outcome: str, duration_ms: float,
                          status_code: Optional[int] = None, **kwargs) -> None:
        """Log one outbound proxy attempt; anything but "success" is a warning"""
        status = f" [{status_code}]" if status_code is not None else ""
        self.log(
            logging.INFO if outcome == "success" else logging.WARNING,
            f"Proxy {method} {url} attempt {attempt}: {outcome}{status} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "proxy_attempt",
                "http_method": method,
                "target_url": url,
                "attempt": attempt,
                "outcome": outcome,
                "http_status": status_code,
                "duration_ms": duration_ms,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=True,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_message": str(error),
                "error_context": context,
                **kwargs
            }
        )

    def log_performance(self, operation: str, duration_ms: float,
                        threshold_ms: float = 1000, **kwargs) -> None:
        """Debug-level timing, promoted to a warning above threshold_ms"""
        exceeded = duration_ms > threshold_ms
        message = f"Performance: {operation} took {duration_ms:.2f}ms"
        if exceeded:
            message += f" (threshold: {threshold_ms}ms)"
        self.log(
            logging.WARNING if exceeded else logging.DEBUG,
            message,
            extra={
                "event_type": "performance",
                "operation": operation,
                "duration_ms": duration_ms,
                "threshold_ms": threshold_ms,
                "exceeded_threshold": exceeded,
                **kwargs
            }
        )


def build_formatter(json_output: bool) -> logging.Formatter:
    return JSONFormatter() if json_output else ContextualFormatter(DEV_FORMAT)


def setup_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> AppCraftLogger:
    """
    Configure the "appcraft" logger. Arguments left as None come from
    settings (LOG_LEVEL, production -> JSON, LOG_FILE).
    """
    level = level or settings.LOG_LEVEL
    json_output = settings.is_production if json_output is None else json_output
    log_file = settings.LOG_FILE if log_file is None else log_file

    logging.setLoggerClass(AppCraftLogger)
    app_logger = logging.getLogger("appcraft")
    app_logger.__class__ = AppCraftLogger
    app_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    app_logger.handlers.clear()

    formatter = build_formatter(json_output)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    # Outbound attempts are already logged per attempt
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    app_logger.debug(
        "Logging initialized",
        extra={"environment": settings.ENVIRONMENT, "json_logging": json_output},
    )
    return app_logger


logger: AppCraftLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'build_formatter',
    'get_request_id',
    'set_request_id',
    'generate_request_id',
    'AppCraftLogger',
    'JSONFormatter',
    'ContextualFormatter',
]
