"""Structured log event data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class LogLevel(str, Enum):
    """Event severity levels."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class LogEvent(BaseModel):
    """A single formatted log event."""

    model_config = ConfigDict(frozen=True)

    timestamp: str
    level: LogLevel
    message: str
    data: Any = None
    environment: str
