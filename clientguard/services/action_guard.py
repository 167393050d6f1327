"""
Guarded execution of user- and network-initiated actions.

An action passes through, in order: rate limiting, input validation, the
retry policy, and error classification of a final failure.
"""

from typing import Any, Awaitable, Callable, Mapping, Optional

from clientguard.config import Settings, settings as default_settings
from clientguard.models.action import ActionResult
from clientguard.services.error_classifier import handle_error
from clientguard.services.rate_limiter import RateLimiter
from clientguard.services.validator import FieldValidator, validate_form
from clientguard.utils.logging import EventLogger, get_event_logger
from clientguard.utils.resilience import (
    retry_request,
    DEFAULT_RETRIES,
    DEFAULT_DELAY,
    DEFAULT_BACKOFF_MULTIPLIER,
)


class ActionGuard:
    """
    Runs actions behind a rate limiter, validation and retries.

    Args:
        limiter: Rate limiter consulted before every action
        event_logger: Event logger (default: process-wide logger)
        settings: Environment configuration (default: global settings)
    """

    def __init__(
        self,
        limiter: RateLimiter,
        event_logger: Optional[EventLogger] = None,
        settings: Optional[Settings] = None
    ):
        self.limiter = limiter
        self._event_logger = event_logger
        self.settings = settings or default_settings

    @property
    def event_logger(self) -> EventLogger:
        return self._event_logger or get_event_logger()

    async def execute(
        self,
        key: str,
        operation: Callable[[], Awaitable[Any]],
        values: Optional[Mapping[str, Any]] = None,
        validators: Optional[Mapping[str, FieldValidator]] = None,
        retries: int = DEFAULT_RETRIES,
        delay: float = DEFAULT_DELAY,
        backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
        context: Optional[str] = None
    ) -> ActionResult:
        """
        Run an action through the guard pipeline.

        The operation is not invoked when the key is rate limited or the
        submitted values fail validation.

        Args:
            key: Rate limiting key
            operation: Zero-argument coroutine function performing the action
            values: Submitted values to validate
            validators: Validator by field name
            retries: Retries allowed after the first attempt
            delay: Wait before the first retry in seconds
            backoff_multiplier: Factor applied to the wait after each retry
            context: Label used when reporting a failure (default: the key)

        Returns:
            ActionResult describing the outcome
        """
        if not self.limiter.is_allowed(key):
            return ActionResult(success=False, rate_limited=True)

        form = None
        if validators:
            form = validate_form(values or {}, validators)
            if not form.is_valid:
                self.event_logger.debug("Validation failed", {"key": key, "fields": sorted(form.errors)})
                return ActionResult(success=False, form=form)

        try:
            value = await retry_request(
                operation,
                retries=retries,
                delay=delay,
                backoff_multiplier=backoff_multiplier
            )
        except Exception as e:
            classified = handle_error(e, context or key, self.event_logger, self.settings)
            return ActionResult(success=False, form=form, error=classified)

        return ActionResult(success=True, value=value, form=form)
