"""
Utility modules for the client guard.
"""

from clientguard.utils.logging import (
    get_logger,
    setup_logging,
    EventLogger,
    get_event_logger,
    set_event_logger,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "EventLogger",
    "get_event_logger",
    "set_event_logger",
]
