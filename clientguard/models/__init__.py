"""Data models for the client guard."""

from .action import ActionResult, RetryAttempt
from .credential import StorageTier, StoredCredential
from .error import ClassifiedError, ErrorBoundaryMessage, ErrorKind
from .log_event import LogEvent, LogLevel
from .upload import UploadedFile
from .validation import FormResult, UserRole, ValidationResult

__all__ = [
    # Error models
    "ErrorKind",
    "ClassifiedError",
    "ErrorBoundaryMessage",
    # Validation models
    "UserRole",
    "ValidationResult",
    "FormResult",
    # Logging models
    "LogLevel",
    "LogEvent",
    # Credential models
    "StorageTier",
    "StoredCredential",
    # Upload models
    "UploadedFile",
    # Action models
    "RetryAttempt",
    "ActionResult",
]
