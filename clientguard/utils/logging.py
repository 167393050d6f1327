"""
Structured logging utilities with JSON formatting and local error retention.

This module provides:
- JSON formatted log output for machine-readable logs
- Context injection (environment, key) via LoggerAdapter
- EventLogger, the process-wide event logger used by every guard component
- A bounded ring buffer of recent error events for diagnostics
"""

import logging
import json
import sys
import threading
import traceback
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, MutableMapping
from logging import LogRecord

from clientguard.config import Settings, settings as default_settings
from clientguard.models.log_event import LogEvent, LogLevel


# Attributes every LogRecord carries; anything else came in through extra
_RECORD_ATTRIBUTES = frozenset([
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "taskName", "exc_info", "exc_text", "stack_info",
])

_PROMOTED_FIELDS = ("environment", "key")

_STDLIB_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}

ExternalSink = Callable[[LogEvent], None]


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON with standard fields:
    - timestamp: ISO 8601 formatted timestamp
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - environment / key: promoted context fields when present
    - context: Any other fields passed through extra
    - error: Error details (when exception info is attached)
    """

    def format(self, record: LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in _PROMOTED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and key not in _PROMOTED_FIELDS
        }
        if extra_fields:
            log_data["context"] = extra_fields

        if record.exc_info:
            log_data["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stack_trace": "".join(traceback.format_exception(*record.exc_info))
            }

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName
        }

        return json.dumps(log_data, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects context fields into all log records.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        """Merge adapter context into the record's extra fields."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextLoggerAdapter":
        """
        Create a new logger adapter with additional context.

        Args:
            **context: Additional context fields

        Returns:
            New logger adapter with merged context
        """
        new_extra = self.extra.copy()
        new_extra.update(context)
        return ContextLoggerAdapter(self.logger, new_extra)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("redis").setLevel(logging.WARNING)


def get_logger(name: str, **context: Any) -> ContextLoggerAdapter:
    """
    Get a context-aware logger for a module.

    Args:
        name: Logger name (typically __name__)
        **context: Initial context fields

    Returns:
        Context logger adapter
    """
    base_logger = logging.getLogger(name)
    return ContextLoggerAdapter(base_logger, context)


class EventLogger:
    """
    Event logger shared by every guard component.

    The logger is enabled in development or when error tracking is turned on.
    Enabled events are written to the console logger in development and
    forwarded to the external sink in production. Error events are retained
    in a bounded ring buffer regardless of the enabled flag; once the buffer
    is full the oldest entry is evicted.

    Args:
        settings: Environment configuration (default: global settings)
        external_sink: Callable receiving events in production. When None,
            events are forwarded to the ``clientguard.tracking`` logger.
        name: Name of the console logger

    Example:
        event_logger = EventLogger(settings)
        event_logger.warn("Rate limit exceeded", {"key": "login", "attempts": 5})
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        external_sink: Optional[ExternalSink] = None,
        name: str = "clientguard.events"
    ):
        self.settings = settings or default_settings
        self.is_enabled = self.settings.is_development or self.settings.enable_error_tracking
        self._external_sink = external_sink
        self._console = get_logger(name, environment=self.settings.environment)
        self._tracking = logging.getLogger("clientguard.tracking")
        self._errors: deque = deque(maxlen=self.settings.error_buffer_size)
        self._errors_lock = threading.Lock()

    def format_event(self, level: LogLevel, message: str, data: Any = None) -> LogEvent:
        """Build a timestamped event for the current environment."""
        return LogEvent(
            timestamp=datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            level=level,
            message=message,
            data=data,
            environment=self.settings.environment,
        )

    def log(self, level: LogLevel, message: str, data: Any = None) -> Optional[LogEvent]:
        """
        Record an event.

        Args:
            level: Event level
            message: Event message
            data: Optional structured payload

        Returns:
            The formatted event, or None when nothing was recorded
        """
        level = LogLevel(level)
        is_error = level == LogLevel.ERROR

        if not self.is_enabled and not is_error:
            return None

        event = self.format_event(level, message, data)

        if is_error:
            with self._errors_lock:
                self._errors.append(event)

        if self.is_enabled:
            if self.settings.is_development:
                self._console.log(
                    _STDLIB_LEVELS[level],
                    f"[{level.value.upper()}] {message}",
                    extra={"data": data}
                )

            if self.settings.is_production and self.settings.enable_error_tracking:
                self._send_to_external_sink(event)

        return event

    def _send_to_external_sink(self, event: LogEvent) -> None:
        if self._external_sink is None:
            self._tracking.log(_STDLIB_LEVELS[event.level], event.message, extra={"event": event.model_dump(mode="json")})
            return

        try:
            self._external_sink(event)
        except Exception:
            # Sink failures stay inside the logger
            self._tracking.exception(f"External log sink failed for event: {event.message}")

    def error(self, message: str, data: Any = None) -> Optional[LogEvent]:
        """Error level logging."""
        return self.log(LogLevel.ERROR, message, data)

    def warn(self, message: str, data: Any = None) -> Optional[LogEvent]:
        """Warning level logging."""
        return self.log(LogLevel.WARN, message, data)

    def info(self, message: str, data: Any = None) -> Optional[LogEvent]:
        """Info level logging."""
        return self.log(LogLevel.INFO, message, data)

    def debug(self, message: str, data: Any = None) -> Optional[LogEvent]:
        """Debug level logging. No-op outside development."""
        if not self.settings.is_development:
            return None
        return self.log(LogLevel.DEBUG, message, data)

    def api_request(self, method: str, url: str, data: Any = None) -> Optional[LogEvent]:
        """Log an outgoing API request."""
        return self.debug(f"API Request: {method.upper()} {url}", data)

    def api_response(self, method: str, url: str, status: int, data: Any = None) -> Optional[LogEvent]:
        """Log an API response. Responses with status >= 400 are errors."""
        level = LogLevel.ERROR if status >= 400 else LogLevel.DEBUG
        return self.log(level, f"API Response: {method.upper()} {url} - {status}", data)

    def user_action(self, action: str, details: Any = None) -> Optional[LogEvent]:
        """Log a user-initiated action."""
        return self.info(f"User Action: {action}", details)

    def performance(self, label: str, duration_ms: float) -> Optional[LogEvent]:
        """Log a timing measurement."""
        return self.debug(f"Performance: {label} took {duration_ms}ms")

    def get_stored_errors(self) -> List[LogEvent]:
        """Return the retained error events, oldest first."""
        with self._errors_lock:
            return list(self._errors)

    def clear_stored_errors(self) -> None:
        """Drop every retained error event."""
        with self._errors_lock:
            self._errors.clear()


_event_logger: Optional[EventLogger] = None
_event_logger_lock = threading.Lock()


def get_event_logger() -> EventLogger:
    """Get the process-wide event logger, creating it on first use."""
    global _event_logger
    with _event_logger_lock:
        if _event_logger is None:
            _event_logger = EventLogger()
        return _event_logger


def set_event_logger(event_logger: EventLogger) -> None:
    """Replace the process-wide event logger (used at startup and in tests)."""
    global _event_logger
    with _event_logger_lock:
        _event_logger = event_logger
