"""
Security helpers for user-supplied data.

This module provides:
- HTML escaping of free-text input
- URL sanitization restricted to http/https
- File upload validation against size, MIME type and extension allow-lists
- Masking of sensitive fields in log payloads
- Hashing and random token generation
"""

import hashlib
import re
import secrets
from typing import Any, Iterable, List, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

from clientguard.models.upload import UploadedFile
from clientguard.models.validation import ValidationResult
from clientguard.utils.logging import EventLogger, get_event_logger


HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}
_HTML_SPECIAL = re.compile(r"[&<>\"'/]")

ALLOWED_URL_SCHEMES = ("http", "https")

DEFAULT_MAX_UPLOAD_SIZE = 5 * 1024 * 1024  # 5MB
DEFAULT_ALLOWED_TYPES = ("image/jpeg", "image/png", "image/gif", "application/pdf")

DEFAULT_SENSITIVE_FIELDS = ("password", "token", "ssn", "creditCard")
MASK = "***MASKED***"

_url_adapter = TypeAdapter(AnyUrl)


def sanitize_input(value: Any) -> Any:
    """Escape HTML special characters in a string. Non-strings are returned unchanged."""
    if not isinstance(value, str):
        return value

    return _HTML_SPECIAL.sub(lambda match: HTML_ESCAPES[match.group(0)], value)


def sanitize_url(url: str, event_logger: Optional[EventLogger] = None) -> Optional[str]:
    """
    Normalize a URL, accepting only http and https.

    Args:
        url: URL to check
        event_logger: Logger for rejected URLs (default: process-wide logger)

    Returns:
        Normalized URL, or None if the URL is invalid or uses another scheme
    """
    event_logger = event_logger or get_event_logger()

    try:
        parsed = _url_adapter.validate_python(url)
    except ValidationError:
        event_logger.warn("Invalid URL provided", {"url": url})
        return None

    if parsed.scheme not in ALLOWED_URL_SCHEMES:
        event_logger.warn("Blocked non-HTTP(S) URL", {"url": url})
        return None

    return str(parsed)


def _allowed_extensions(allowed_types: Iterable[str]) -> List[str]:
    extensions = []
    for content_type in allowed_types:
        extension = content_type.split("/")[-1]
        extensions.append("jpg" if extension == "jpeg" else extension)
    return extensions


def validate_file_upload(
    file: UploadedFile,
    max_size: int = DEFAULT_MAX_UPLOAD_SIZE,
    allowed_types: Iterable[str] = DEFAULT_ALLOWED_TYPES
) -> ValidationResult:
    """
    Validate an uploaded file.

    Checks, in order: size ceiling, MIME type allow-list, and the file
    extension against the extensions derived from the MIME allow-list.
    """
    allowed_types = list(allowed_types)

    if file.size > max_size:
        return ValidationResult(
            is_valid=False,
            error=f"File size exceeds {max_size / 1024 / 1024:g}MB limit"
        )

    if file.content_type not in allowed_types:
        return ValidationResult(is_valid=False, error="File type not allowed")

    extension = file.name.split(".")[-1].lower()
    if extension not in _allowed_extensions(allowed_types):
        return ValidationResult(is_valid=False, error="File extension not allowed")

    return ValidationResult(is_valid=True)


def mask_sensitive_data(data: Any, fields: Iterable[str] = DEFAULT_SENSITIVE_FIELDS) -> Any:
    """
    Return a copy of a mapping with sensitive fields redacted.

    Only top-level fields holding a truthy value are replaced. Anything that
    is not a dict is returned unchanged.
    """
    if not isinstance(data, dict):
        return data

    masked = dict(data)
    for field in fields:
        if masked.get(field):
            masked[field] = MASK

    return masked


def hash_data(data: str) -> str:
    """SHA-256 hex digest of text, for fingerprinting. Not for password storage."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def generate_secure_random(length: int = 32) -> str:
    """Hex string encoding ``length`` cryptographically random bytes."""
    return secrets.token_hex(length)
