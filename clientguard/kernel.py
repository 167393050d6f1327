"""
Startup construction of the client guard components.

Builds one event logger, the named rate limiters and the credential store
for a process, and hands the same instances to every consumer.
"""

from typing import Optional

from clientguard.config import Settings, settings as default_settings
from clientguard.services.action_guard import ActionGuard
from clientguard.services.credential_store import CredentialStore, StorageBackend
from clientguard.services.rate_limiter import create_api_rate_limiter, create_login_rate_limiter
from clientguard.utils.logging import EventLogger, ExternalSink, set_event_logger, setup_logging


SECURITY_FEATURES = ["XSS Protection", "Rate Limiting", "Secure Token Storage"]


class SecurityKernel:
    """
    Process-wide set of guard components.

    Args:
        settings: Environment configuration (default: global settings)
        external_sink: Production sink for log events
        session_storage: Ephemeral credential tier override
        durable_storage: Durable credential tier override

    Example:
        kernel = SecurityKernel(settings)
        kernel.initialize()

        result = await kernel.login_guard.execute(email, submit_login, values, validators)
        if result.success:
            kernel.credential_store.save_session(result.value["accessToken"])
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        external_sink: Optional[ExternalSink] = None,
        session_storage: Optional[StorageBackend] = None,
        durable_storage: Optional[StorageBackend] = None
    ):
        self.settings = settings or default_settings
        self.event_logger = EventLogger(self.settings, external_sink=external_sink)

        self.login_limiter = create_login_rate_limiter(self.settings, self.event_logger)
        self.api_limiter = create_api_rate_limiter(self.settings, self.event_logger)

        self.credential_store = CredentialStore(
            self.settings,
            session_storage=session_storage,
            durable_storage=durable_storage,
            event_logger=self.event_logger
        )

        self.login_guard = ActionGuard(self.login_limiter, self.event_logger, self.settings)
        self.api_guard = ActionGuard(self.api_limiter, self.event_logger, self.settings)

    def initialize(self) -> None:
        """
        Configure structured logging, install the kernel's event logger as the
        process-wide logger and log startup.
        """
        setup_logging(self.settings.log_level)
        set_event_logger(self.event_logger)
        self.event_logger.info("Security features initialized", {
            "app": self.settings.app_name,
            "version": self.settings.app_version,
            "environment": self.settings.environment,
            "features": SECURITY_FEATURES,
        })

    def csp_header(self):
        """Content-Security-Policy header for the configured API."""
        return self.settings.build_csp_header()
