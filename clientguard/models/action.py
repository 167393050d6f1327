"""Retry and guarded action data models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from .error import ClassifiedError
from .validation import FormResult


class RetryAttempt(BaseModel):
    """Transient record describing a scheduled retry."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    attempt_number: int
    delay: float
    last_error: BaseException


class ActionResult(BaseModel):
    """Outcome of an action run through the guard pipeline."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    value: Optional[Any] = None
    rate_limited: bool = False
    form: Optional[FormResult] = None
    error: Optional[ClassifiedError] = None
