"""
Sliding-window rate limiting for client actions.

Each limiter tracks, per key, the timestamps of admitted attempts inside the
trailing window. Expired timestamps are dropped lazily on every check; no
timer runs in the background.

Keys are never evicted on their own: memory for one key is bounded by
max_attempts timestamps, but the number of tracked keys grows with every
distinct key until reset() or clear_all() is called.
"""

import threading
import time
from typing import Callable, Dict, List, Optional

from clientguard.config import Settings, settings as default_settings
from clientguard.utils.logging import EventLogger, get_event_logger


class RateLimiter:
    """
    Sliding-window admission control keyed by an arbitrary string.

    Args:
        max_attempts: Attempts admitted per key inside one window
        window_seconds: Length of the trailing window in seconds
        event_logger: Logger for rejected attempts (default: process-wide logger)
        clock: Monotonic time source in seconds (default: time.monotonic)

    Example:
        login_limiter = RateLimiter(max_attempts=5, window_seconds=900)

        if not login_limiter.is_allowed(email):
            raise AppError.validation("Too many login attempts")
    """

    def __init__(
        self,
        max_attempts: int,
        window_seconds: float,
        event_logger: Optional[EventLogger] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._event_logger = event_logger
        self._clock = clock
        self._attempts: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    @property
    def event_logger(self) -> EventLogger:
        return self._event_logger or get_event_logger()

    def is_allowed(self, key: str) -> bool:
        """
        Check whether an attempt for key is admitted, recording it if so.

        Rejected attempts are not recorded.

        Args:
            key: Action key (e.g. "login" or a user identifier)

        Returns:
            True if the attempt is admitted
        """
        with self._lock:
            now = self._clock()
            recent_attempts = [
                timestamp for timestamp in self._attempts.get(key, [])
                if now - timestamp < self.window_seconds
            ]

            if len(recent_attempts) >= self.max_attempts:
                self._attempts[key] = recent_attempts
                rejected_count = len(recent_attempts)
            else:
                recent_attempts.append(now)
                self._attempts[key] = recent_attempts
                return True

        self.event_logger.warn("Rate limit exceeded", {"key": key, "attempts": rejected_count})
        return False

    def reset(self, key: str) -> None:
        """Clear the window of a single key."""
        with self._lock:
            self._attempts.pop(key, None)

    def clear_all(self) -> None:
        """Clear the windows of every tracked key."""
        with self._lock:
            self._attempts.clear()

    def attempt_count(self, key: str) -> int:
        """Number of attempts currently inside the window for key."""
        with self._lock:
            now = self._clock()
            return sum(1 for timestamp in self._attempts.get(key, []) if now - timestamp < self.window_seconds)

    @property
    def tracked_keys(self) -> int:
        """Number of keys holding a window, expired or not."""
        with self._lock:
            return len(self._attempts)


def create_login_rate_limiter(
    settings: Optional[Settings] = None,
    event_logger: Optional[EventLogger] = None
) -> RateLimiter:
    """Create rate limiter configured for authentication attempts (5 per 15 minutes)."""
    settings = settings or default_settings
    return RateLimiter(
        max_attempts=settings.login_rate_limit_max_attempts,
        window_seconds=settings.login_rate_limit_window_seconds,
        event_logger=event_logger
    )


def create_api_rate_limiter(
    settings: Optional[Settings] = None,
    event_logger: Optional[EventLogger] = None
) -> RateLimiter:
    """Create rate limiter configured for general requests (60 per minute)."""
    settings = settings or default_settings
    return RateLimiter(
        max_attempts=settings.api_rate_limit_max_attempts,
        window_seconds=settings.api_rate_limit_window_seconds,
        event_logger=event_logger
    )
