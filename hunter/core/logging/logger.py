"""
Hunter Logging Subsystem

Stdlib logging, configured once on import:

- Every record goes through a bounded queue (``QueueHandler``) to a
  ``QueueListener`` thread, so file and console I/O never block the event
  loop. When the queue is full the record is dropped with a note on stderr.
- ``ContextFilter`` stamps records with the ``user_id``, ``operation`` and
  ``correlation_id`` bound by ``LogContext`` (ContextVar based, so each task
  sees its own context). An explicit ``extra={"user_id": ...}`` wins.
- Console output is JSON in production (or with ``LOG_JSON=true``), colored
  text on a TTY, plain text otherwise. With ``LOG_TO_FILE`` a JSON file
  rotates at midnight UTC and keeps one day of history.

Fields passed through ``extra`` are nested under ``"extra"`` in JSON output.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from hunter.core.config.config import Config

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-36s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DAILY_BASENAME = "hunter_daily.json.log"
QUEUE_MAX_SIZE = 10_000

CONTEXT_FIELDS = ("user_id", "operation", "correlation_id")

_log_context: ContextVar[Dict[str, Any]] = ContextVar("hunter_log_context", default={})
_queue_listener: Optional[QueueListener] = None


def _level() -> int:
    return getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO)


def _use_json() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return Config.LOG_JSON


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get()
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, context.get(field, "N/A"))
        return True


class ColoredFormatter(logging.Formatter):
    COLORS: Dict[str, str] = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        original = record.levelname
        color = self.COLORS.get(original)
        if color:
            record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """One JSON object per record; context fields only when bound."""

    # Attributes every LogRecord carries; anything else came from ``extra``
    _RECORD_ATTRS = frozenset(
        logging.LogRecord("", 0, "", 0, "", None, None).__dict__
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value not in (None, "N/A"):
                payload[field] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self._RECORD_ATTRS
            and key not in CONTEXT_FIELDS
            and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, ensure_ascii=False, default=str)


class _DroppingQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            sys.stderr.write("Hunter logging queue full; dropping log record.\n")


# ============================================================================
# Setup & Shutdown
# ============================================================================


def _handlers() -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    if _use_json():
        console.setFormatter(JSONFormatter())
    elif sys.stdout.isatty():
        console.setFormatter(ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT))
    else:
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    handlers: List[logging.Handler] = [console]

    if Config.LOG_TO_FILE:
        logs_dir = Path(Config.LOGS_DIR).resolve()
        logs_dir.mkdir(parents=True, exist_ok=True)
        daily = TimedRotatingFileHandler(
            filename=str(logs_dir / DAILY_BASENAME),
            when="midnight",
            backupCount=1,
            encoding="utf-8",
            utc=True,
        )
        daily.setFormatter(JSONFormatter())
        handlers.append(daily)

    return handlers


def setup_logging() -> None:
    global _queue_listener

    if _queue_listener is not None:
        return

    root = logging.getLogger()
    root.setLevel(_level())
    root.handlers.clear()

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)
    _queue_listener = QueueListener(log_queue, *_handlers(), respect_handler_level=True)
    _queue_listener.start()

    # Filter on the producing side so the ContextVar is read in the caller's task
    queue_handler = _DroppingQueueHandler(log_queue)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    for noisy in ("sqlalchemy.engine", "sqlalchemy.pool", "asyncio", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(_level()),
            "json": _use_json(),
            "file": Config.LOG_TO_FILE,
        },
    )


def shutdown_logging() -> None:
    """Flush the queue and close every handler."""
    global _queue_listener

    if _queue_listener is None:
        return

    logging.getLogger(__name__).info("Shutting down logging subsystem.")
    _queue_listener.stop()
    for handler in _queue_listener.handlers:
        handler.close()
    _queue_listener = None

    logging.getLogger().handlers.clear()


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Bind ``user_id``, ``operation`` and a correlation id for a block.

    Works as both a sync and async context manager:

    >>> async with LogContext(user_id=42, operation="advance_objective"):
    ...     logger.info("Advancing objective")
    """

    def __init__(
        self,
        user_id: Optional[int] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context: Dict[str, Any] = {
            **_log_context.get(),
            "correlation_id": correlation_id or uuid.uuid4().hex[:8],
            **extra,
        }
        if user_id is not None:
            self.context["user_id"] = str(user_id)
        if operation is not None:
            self.context["operation"] = operation
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get())


setup_logging()
