"""Error classification data models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorKind(str, Enum):
    """Uniform failure taxonomy."""

    NETWORK = "network"
    API = "api"
    APP = "app"
    UNKNOWN = "unknown"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"


class ClassifiedError(BaseModel):
    """Uniform record produced by classifying a raised failure."""

    model_config = ConfigDict(frozen=True)

    message: str
    status_code: int = 500
    kind: ErrorKind
    details: Optional[Any] = None


class ErrorBoundaryMessage(BaseModel):
    """User-facing description of an unrecoverable failure."""

    model_config = ConfigDict(frozen=True)

    title: str
    message: str
    stack: Optional[str] = None
