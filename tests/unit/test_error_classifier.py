"""
Unit tests for error classification and presentation.
"""

import pytest

from clientguard.config import Settings
from clientguard.errors import AppError, TransportError, TransportResponse
from clientguard.models.error import ClassifiedError, ErrorKind
from clientguard.services.error_classifier import (
    BOUNDARY_MESSAGE,
    classify_error,
    get_error_boundary_message,
    get_user_friendly_message,
    handle_error,
    is_retryable,
)
from clientguard.utils.logging import EventLogger


def _api_error(status_code: int, body=None) -> TransportError:
    return TransportError(response=TransportResponse(status_code=status_code, body=body))


class TestClassifyError:
    """Test the classification decision order."""

    def test_no_response_is_network(self):
        classified = classify_error(TransportError("timeout"))

        assert classified == ClassifiedError(
            message="Network error. Please check your connection.",
            status_code=503,
            kind=ErrorKind.NETWORK,
        )

    def test_response_message_field(self):
        classified = classify_error(_api_error(422, {"message": "Email taken", "error": "ignored"}))

        assert classified.kind == ErrorKind.API
        assert classified.status_code == 422
        assert classified.message == "Email taken"

    def test_response_error_field(self):
        classified = classify_error(_api_error(404, {"error": "Not found"}))

        assert classified.message == "Not found"

    def test_response_without_message(self):
        classified = classify_error(_api_error(500, "<html>oops</html>"))

        assert classified.message == "Something went wrong. Please try again."
        assert classified.status_code == 500
        assert classified.details is None

    def test_response_details(self):
        details = [{"field": "email", "issue": "duplicate"}]

        classified = classify_error(_api_error(400, {"message": "Invalid", "details": details}))

        assert classified.details == details

    def test_generic_app_error(self):
        classified = classify_error(AppError("Profile incomplete", details={"step": 2}))

        assert classified.kind == ErrorKind.APP
        assert classified.status_code == 500
        assert classified.message == "Profile incomplete"
        assert classified.details == {"step": 2}

    def test_validation_error(self):
        classified = classify_error(AppError.validation("Bad input", {"field": "email"}))

        assert classified.kind == ErrorKind.VALIDATION
        assert classified.status_code == 400
        assert classified.details == {"field": "email"}

    def test_authentication_error(self):
        classified = classify_error(AppError.authentication())

        assert classified.kind == ErrorKind.AUTHENTICATION
        assert classified.status_code == 401
        assert classified.message == "You are not authorized to access this resource."

    def test_network_domain_error(self):
        classified = classify_error(AppError.network())

        assert classified.kind == ErrorKind.NETWORK
        assert classified.status_code == 503

    def test_unknown_error(self):
        classified = classify_error(KeyError("token"))

        assert classified.kind == ErrorKind.UNKNOWN
        assert classified.status_code == 500
        assert classified.message == "Something went wrong. Please try again."

    def test_classified_error_is_immutable(self):
        classified = classify_error(KeyError("token"))

        with pytest.raises(Exception):
            classified.message = "changed"


def test_app_error_rejects_non_domain_kind():
    with pytest.raises(ValueError):
        AppError("bad", kind=ErrorKind.API)


class TestIsRetryable:

    @pytest.mark.parametrize("status_code", [400, 401, 404, 429, 499])
    def test_client_errors(self, status_code):
        assert is_retryable(_api_error(status_code)) is False

    @pytest.mark.parametrize("status_code", [500, 502, 503])
    def test_server_errors(self, status_code):
        assert is_retryable(_api_error(status_code)) is True

    def test_network_and_other_failures(self):
        assert is_retryable(TransportError()) is True
        assert is_retryable(AppError.validation("Bad input")) is True
        assert is_retryable(RuntimeError("boom")) is True


class TestHandleError:

    def test_development_logs_with_context(self):
        event_logger = EventLogger(Settings(environment="development"))

        classified = handle_error(_api_error(500), "API Request", event_logger, event_logger.settings)

        assert classified.kind == ErrorKind.API
        stored = event_logger.get_stored_errors()
        assert len(stored) == 1
        assert stored[0].message.startswith("[Error - API Request]")
        assert stored[0].data["classified"]["status_code"] == 500

    def test_development_empty_context_is_silent(self):
        event_logger = EventLogger(Settings(environment="development"))

        handle_error(_api_error(404), "", event_logger, event_logger.settings)

        assert event_logger.get_stored_errors() == []

    def test_production_forwards_when_tracking_enabled(self):
        sink_events = []
        settings = Settings(environment="production", enable_error_tracking=True)
        event_logger = EventLogger(settings, external_sink=sink_events.append)

        handle_error(RuntimeError("boom"), "", event_logger, settings)

        assert len(sink_events) == 1
        assert sink_events[0].data["error_type"] == "RuntimeError"

    def test_production_retains_without_tracking(self):
        sink_events = []
        settings = Settings(environment="production", enable_error_tracking=False)
        event_logger = EventLogger(settings, external_sink=sink_events.append)

        handle_error(RuntimeError("boom"), "checkout", event_logger, settings)

        assert sink_events == []
        assert len(event_logger.get_stored_errors()) == 1


def test_user_friendly_message():
    assert get_user_friendly_message(_api_error(409, {"message": "Already booked"})) == "Already booked"


class TestErrorBoundaryMessage:

    def test_development_exposes_details(self):
        try:
            raise RuntimeError("render failed")
        except RuntimeError as e:
            error = e

        message = get_error_boundary_message(error, Settings(environment="development"))

        assert message.title == "Application Error"
        assert message.message == "render failed"
        assert "RuntimeError: render failed" in message.stack

    def test_production_is_generic(self):
        message = get_error_boundary_message(RuntimeError("secret detail"), Settings(environment="production"))

        assert message.title == "Something went wrong"
        assert message.message == BOUNDARY_MESSAGE
        assert message.stack is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
