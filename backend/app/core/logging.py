"""
Structured Logging & Request Tracing for PBU Records

- trace_id per request (contextvars, async-safe)
- JSON structured log lines
- component loggers

Usage:
    from app.core.logging import get_logger, TracingContext

    trace_id = TracingContext.new_trace()

    logger = get_logger("DraftManager")
    logger.info("draft_saved", account_id=7, entry_count=42)
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, UTC
from typing import Optional

# Context variables (thread-safe, async-safe)
_trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")
_account_id_var: ContextVar[Optional[int]] = ContextVar("account_id", default=None)


class TracingContext:
    """Request tracing context"""

    @staticmethod
    def new_trace() -> str:
        """Create and set a new trace_id"""
        trace_id = str(uuid.uuid4())[:8]
        _trace_id_var.set(trace_id)
        return trace_id

    @staticmethod
    def get_trace_id() -> str:
        return _trace_id_var.get() or "no-trace"

    @staticmethod
    def set_trace_id(trace_id: str) -> None:
        """Continue an existing trace (e.g. from an upstream header)"""
        _trace_id_var.set(trace_id)

    @staticmethod
    def set_account(account_id: int) -> None:
        _account_id_var.set(account_id)

    @staticmethod
    def get_account_id() -> Optional[int]:
        return _account_id_var.get()

    @staticmethod
    def clear() -> None:
        _trace_id_var.set("")
        _account_id_var.set(None)


class JSONLogFormatter(logging.Formatter):
    """JSON log formatter"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "trace_id": TracingContext.get_trace_id(),
            "component": getattr(record, "component", record.name),
            "event": getattr(record, "event", record.getMessage()),
        }

        account_id = TracingContext.get_account_id()
        if account_id is not None:
            log_entry["account_id"] = account_id

        # Extra kwargs passed to StructuredLogger
        extra_fields = getattr(record, "extra_fields", {})
        if extra_fields:
            log_entry.update(extra_fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """Structured logger wrapper"""

    def __init__(self, component: str, logger: logging.Logger = None):
        """
        Args:
            component: component name (e.g. "DraftManager", "RecordStore")
            logger: existing logger (a new "pbu.<component>" logger if None)
        """
        self.component = component
        self._logger = logger or logging.getLogger(f"pbu.{component}")

    def _log(self, level: int, event: str, exc_info: bool = False, **kwargs) -> None:
        extra = {
            "component": self.component,
            "event": event,
            "extra_fields": kwargs,
        }
        self._logger.log(level, event, extra=extra, exc_info=exc_info)

    def debug(self, event: str, **kwargs) -> None:
        self._log(logging.DEBUG, event, **kwargs)

    def info(self, event: str, **kwargs) -> None:
        self._log(logging.INFO, event, **kwargs)

    def warning(self, event: str, **kwargs) -> None:
        self._log(logging.WARNING, event, **kwargs)

    def error(self, event: str, exc_info: bool = False, **kwargs) -> None:
        self._log(logging.ERROR, event, exc_info=exc_info, **kwargs)

    def timed_operation(self, operation: str) -> "TimedOperation":
        """Timing context manager"""
        return TimedOperation(self, operation)


class TimedOperation:
    """Logs <operation>_complete / <operation>_failed with elapsed_ms"""

    def __init__(self, logger: StructuredLogger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.debug(f"{self.operation}_start")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed_ms = int((time.time() - self.start_time) * 1000)

        if exc_type:
            self.logger.warning(
                f"{self.operation}_failed",
                elapsed_ms=elapsed_ms,
                error=str(exc_val),
                error_type=exc_type.__name__,
            )
        else:
            self.logger.info(f"{self.operation}_complete", elapsed_ms=elapsed_ms)

        return False  # Don't suppress exceptions


# Logger cache
_loggers: dict[str, StructuredLogger] = {}
_setup_done = False


def setup_structured_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure the "pbu" logger tree

    Args:
        level: DEBUG, INFO, WARNING, ERROR
        json_output: JSON lines when True, plain text otherwise
    """
    global _setup_done

    if _setup_done:
        return

    root_logger = logging.getLogger("pbu")
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))

    if json_output:
        handler.setFormatter(JSONLogFormatter())
    else:
        # Plain text (development)
        handler.setFormatter(logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
        ))

    root_logger.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    _setup_done = True


def get_logger(component: str) -> StructuredLogger:
    """Per-component logger (cached)"""
    if component not in _loggers:
        _loggers[component] = StructuredLogger(component)

    return _loggers[component]


class LogEvents:
    """Standard log event names"""

    # Request
    REQUEST_START = "request_start"
    REQUEST_COMPLETE = "request_complete"
    REQUEST_FAILED = "request_failed"

    # Accounts
    ACCOUNT_REGISTERED = "account_registered"
    ACCOUNT_LOGIN = "account_login"
    ACCOUNT_LOGIN_REJECTED = "account_login_rejected"

    # Drafts
    DRAFT_CREATED = "draft_created"
    DRAFT_REPLACED = "draft_replaced"
    DRAFT_DISCARDED = "draft_discarded"
    DRAFT_POINTER_DANGLING = "draft_pointer_dangling"
    DRAFT_POINTER_RACE = "draft_pointer_race"

    # Snapshots
    SNAPSHOT_PROMOTED = "snapshot_promoted"

    # Storage
    STORAGE_FAILURE = "storage_failure"
