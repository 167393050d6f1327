"""
Failure shapes recognized by the error classifier.

This module provides:
- AppError, a single tagged-variant exception for domain failures
- TransportError, the shape of a failed call from the transport layer
"""

from typing import Any, Optional

from pydantic import BaseModel

from clientguard.models.error import ErrorKind


# User-facing messages
GENERIC_MESSAGE = "Something went wrong. Please try again."
NETWORK_MESSAGE = "Network error. Please check your connection."
UNAUTHORIZED_MESSAGE = "You are not authorized to access this resource."

# Status codes used by the taxonomy
BAD_REQUEST = 400
UNAUTHORIZED = 401
INTERNAL_SERVER_ERROR = 500
SERVICE_UNAVAILABLE = 503

DOMAIN_KINDS = frozenset({
    ErrorKind.APP,
    ErrorKind.VALIDATION,
    ErrorKind.AUTHENTICATION,
    ErrorKind.NETWORK,
})


class AppError(Exception):
    """
    Domain failure raised by calling code.

    The kind is a closed tag rather than a subclass, so consumers switch on
    ``error.kind``. Use the factory classmethods for the specific variants.

    Args:
        message: Failure description
        status_code: HTTP-equivalent status (default: 500)
        details: Optional structured payload
        kind: Domain kind (default: generic application error)
    """

    def __init__(
        self,
        message: str,
        status_code: int = INTERNAL_SERVER_ERROR,
        details: Optional[Any] = None,
        kind: ErrorKind = ErrorKind.APP
    ):
        if kind not in DOMAIN_KINDS:
            raise ValueError(f"Not a domain error kind: {kind}")
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.kind = kind

    @classmethod
    def validation(cls, message: str, details: Optional[Any] = None) -> "AppError":
        """Create a validation failure (400)."""
        return cls(message, BAD_REQUEST, details, ErrorKind.VALIDATION)

    @classmethod
    def authentication(cls, message: str = UNAUTHORIZED_MESSAGE) -> "AppError":
        """Create an authentication failure (401)."""
        return cls(message, UNAUTHORIZED, None, ErrorKind.AUTHENTICATION)

    @classmethod
    def network(cls, message: str = NETWORK_MESSAGE) -> "AppError":
        """Create a network failure (503)."""
        return cls(message, SERVICE_UNAVAILABLE, None, ErrorKind.NETWORK)

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, status_code={self.status_code}, message={self.message!r})"


class TransportResponse(BaseModel):
    """Response received by the transport layer."""

    status_code: int
    body: Optional[Any] = None


class TransportError(Exception):
    """
    Failure raised by the transport layer.

    ``response`` is None when the network never completed.
    """

    def __init__(self, message: str = "", response: Optional[TransportResponse] = None):
        super().__init__(message or (
            f"Request failed with status {response.status_code}" if response else "No response received"
        ))
        self.response = response
