"""
Logging configuration for qbit-remote.

Console output is either colored text or one JSON object per line, with
an optional rotating log file. ``LogContext`` attaches request fields
(operation, endpoint, torrent hash) to every record logged inside it;
the fields follow asyncio tasks because they live in a context variable.
"""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Never mutated in place; every change stores a new dict.
_log_context: ContextVar[Dict[str, Any]] = ContextVar("qbit_remote_log_context", default={})

CONTEXT_FIELDS = ("operation", "endpoint", "torrent_hash", "status", "duration_ms", "error")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers never go below these levels.
COMPONENT_LOG_LEVELS = {
    "aiohttp": "WARNING",
    "aiohttp.client": "WARNING",
}


class ContextFilter(logging.Filter):
    """Copy the current log context onto each record; explicit ``extra=`` values win."""

    @classmethod
    def set_context(cls, **kwargs) -> None:
        _log_context.set({**_log_context.get(), **kwargs})

    @classmethod
    def clear_context(cls, *keys) -> None:
        """Clear the named fields, or all of them if none are named."""
        if keys:
            context = {k: v for k, v in _log_context.get().items() if k not in keys}
        else:
            context = {}
        _log_context.set(context)

    @classmethod
    def get_context(cls) -> Dict[str, Any]:
        return dict(_log_context.get())

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            record.__dict__.setdefault(key, value)
        return True


def _record_context(record: logging.LogRecord, names) -> Dict[str, Any]:
    return {
        name: getattr(record, name)
        for name in names
        if getattr(record, name, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """Format logs as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_obj = {
            "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_obj.update(_record_context(record, CONTEXT_FIELDS))

        if record.exc_info:
            exc_type = record.exc_info[0]
            log_obj["exception"] = self.formatException(record.exc_info)
            log_obj["exception_type"] = exc_type.__name__ if exc_type else None

        return json.dumps(log_obj, default=str)


class ColoredFormatter(logging.Formatter):
    """Text formatter that colors the level name on a TTY and appends the operation context."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    SUFFIX_FIELDS = ("operation", "torrent_hash")

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        color = self.COLORS.get(record.levelname) if self.use_colors else None
        if color:
            message = message.replace(
                record.levelname, f"{color}{record.levelname}{self.RESET}", 1
            )

        context = _record_context(record, self.SUFFIX_FIELDS)
        if context:
            message += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return message


def _formatter(log_format: str, console: bool, use_colors: bool) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    if console:
        return ColoredFormatter(use_colors=use_colors)
    return logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: str = "text",
    max_file_size_mb: int = 10,
    backup_count: int = 5,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure the root logger for the CLI.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Applies to the
            root logger, its handlers and the ``qbit_remote`` package.
        log_file: Also write to this file, rotated by size.
        log_format: "text" or "json".
        max_file_size_mb: Rotate the log file at this size.
        backup_count: Rotated files to keep.
        use_colors: Color console level names when stderr is a TTY.

    Returns:
        The configured root logger
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        ))

    context_filter = ContextFilter()
    for handler in handlers:
        handler.setLevel(level)
        handler.addFilter(context_filter)
        handler.setFormatter(_formatter(
            log_format,
            console=not isinstance(handler, logging.FileHandler),
            use_colors=use_colors,
        ))
        root_logger.addHandler(handler)

    logging.getLogger("qbit_remote").setLevel(level)
    for logger_name, component_level in COMPONENT_LOG_LEVELS.items():
        logging.getLogger(logger_name).setLevel(max(level, getattr(logging, component_level)))

    logging.getLogger(__name__).debug(
        f"Logging configured: level={log_level}, format={log_format}, "
        f"file={log_file or 'none'}"
    )
    return root_logger


class LogContext:
    """
    Attach context fields to records logged inside the block.

    Usage:
        with LogContext(operation="remove", torrent_hash="ABC123"):
            logger.info("Removing torrent")
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
        return False


def redact_token(token: Optional[str]) -> str:
    """Mask a session cookie for logging, e.g. ``SID=abc`` becomes ``SID=***``."""
    if not token:
        return "<none>"
    name, _, _ = token.partition("=")
    return f"{name}=***"
