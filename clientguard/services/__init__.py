"""Guard services package."""

from clientguard.services.error_classifier import (
    classify_error,
    is_retryable,
    handle_error,
    get_user_friendly_message,
    get_error_boundary_message
)
from clientguard.services.rate_limiter import (
    RateLimiter,
    create_login_rate_limiter,
    create_api_rate_limiter
)
from clientguard.services.credential_store import (
    CredentialStore,
    MemoryStorage,
    RedisStorage,
    StorageError
)

__all__ = [
    'classify_error',
    'is_retryable',
    'handle_error',
    'get_user_friendly_message',
    'get_error_boundary_message',
    'RateLimiter',
    'create_login_rate_limiter',
    'create_api_rate_limiter',
    'CredentialStore',
    'MemoryStorage',
    'RedisStorage',
    'StorageError'
]
