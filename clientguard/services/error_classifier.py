"""
Error classification and presentation.

Converts any raised failure into a ClassifiedError. The decision order is:
1. Transport failure without a response -> network (503)
2. Transport failure with a response -> api (status and body message)
3. AppError -> its own kind, status and message
4. Anything else -> unknown (500)
"""

import traceback
from typing import Any, Optional

from clientguard.config import Settings, settings as default_settings
from clientguard.errors import (
    AppError,
    TransportError,
    GENERIC_MESSAGE,
    NETWORK_MESSAGE,
    INTERNAL_SERVER_ERROR,
    SERVICE_UNAVAILABLE,
)
from clientguard.models.error import ClassifiedError, ErrorBoundaryMessage, ErrorKind
from clientguard.utils.logging import EventLogger, get_event_logger

BOUNDARY_TITLE = "Something went wrong"
BOUNDARY_MESSAGE = "We're sorry for the inconvenience. Please refresh the page or contact support."


def _body_field(body: Any, field: str) -> Any:
    if isinstance(body, dict):
        return body.get(field)
    return None


def classify_error(error: BaseException) -> ClassifiedError:
    """
    Classify a raised failure. Never raises.

    Args:
        error: Any exception

    Returns:
        ClassifiedError describing the failure
    """
    if isinstance(error, TransportError):
        if error.response is None:
            return ClassifiedError(
                message=NETWORK_MESSAGE,
                status_code=SERVICE_UNAVAILABLE,
                kind=ErrorKind.NETWORK,
            )

        body = error.response.body
        message = _body_field(body, "message") or _body_field(body, "error") or GENERIC_MESSAGE
        return ClassifiedError(
            message=str(message),
            status_code=error.response.status_code,
            kind=ErrorKind.API,
            details=_body_field(body, "details"),
        )

    if isinstance(error, AppError):
        return ClassifiedError(
            message=error.message,
            status_code=error.status_code,
            kind=error.kind,
            details=error.details,
        )

    return ClassifiedError(
        message=GENERIC_MESSAGE,
        status_code=INTERNAL_SERVER_ERROR,
        kind=ErrorKind.UNKNOWN,
    )


def is_client_error(error: BaseException) -> bool:
    """True if the failure carries a transport response with a 4xx status."""
    if not isinstance(error, TransportError) or error.response is None:
        return False
    return 400 <= error.response.status_code < 500


def is_retryable(error: BaseException) -> bool:
    """Client errors are not transient; every other failure may be retried."""
    return not is_client_error(error)


def handle_error(
    error: BaseException,
    context: str = "",
    event_logger: Optional[EventLogger] = None,
    settings: Optional[Settings] = None
) -> ClassifiedError:
    """
    Report a failure and return its classification.

    In development the failure is logged when a context label is given; an
    empty context suppresses the log. In production the failure is always
    recorded as an error event, which retains it in the local error buffer
    and forwards it to the tracking sink when error tracking is enabled.

    Args:
        error: Exception that occurred
        context: Label of the failing operation
        event_logger: Event logger (default: process-wide logger)
        settings: Environment configuration (default: global settings)

    Returns:
        ClassifiedError for the failure
    """
    settings = settings or default_settings
    event_logger = event_logger or get_event_logger()
    classified = classify_error(error)

    if settings.is_production or context:
        event_logger.error(
            f"[Error - {context}]: {error}" if context else f"[Error]: {error}",
            {
                "error_type": type(error).__name__,
                "classified": classified.model_dump(mode="json"),
            }
        )

    return classified


def get_user_friendly_message(error: BaseException) -> str:
    """Message safe to show to the user for a failure."""
    return classify_error(error).message


def get_error_boundary_message(
    error: BaseException,
    settings: Optional[Settings] = None
) -> ErrorBoundaryMessage:
    """
    Describe an unrecoverable failure for display.

    Development builds expose the raw message and stack; production builds
    substitute a generic message.
    """
    settings = settings or default_settings

    if settings.is_development:
        return ErrorBoundaryMessage(
            title="Application Error",
            message=str(error),
            stack="".join(traceback.format_exception(type(error), error, error.__traceback__)),
        )

    return ErrorBoundaryMessage(title=BOUNDARY_TITLE, message=BOUNDARY_MESSAGE, stack=None)
