"""
Unit tests for security helpers.
"""

import hashlib

import pytest

from clientguard.config import Settings
from clientguard.models.upload import UploadedFile
from clientguard.utils.logging import EventLogger
from clientguard.utils.security import (
    MASK,
    generate_secure_random,
    hash_data,
    mask_sensitive_data,
    sanitize_input,
    sanitize_url,
    validate_file_upload,
)


@pytest.fixture
def event_logger() -> EventLogger:
    return EventLogger(Settings(environment="development"))


class TestSanitizeInput:

    def test_escapes_every_special_character(self):
        sanitized = sanitize_input("<a>'\"/&")

        assert sanitized == "&lt;a&gt;&#x27;&quot;&#x2F;&amp;"
        for char in "<>'\"/":
            assert char not in sanitized

    def test_ampersand_is_escaped_once(self):
        assert sanitize_input("Tom & Jerry") == "Tom &amp; Jerry"
        assert sanitize_input("&lt;") == "&amp;lt;"

    def test_non_string_unchanged(self):
        assert sanitize_input(42) == 42
        assert sanitize_input(None) is None


class TestSanitizeUrl:

    def test_accepts_https(self, event_logger):
        assert sanitize_url("https://example.com/path?q=1", event_logger) == "https://example.com/path?q=1"

    def test_accepts_http(self, event_logger):
        assert sanitize_url("http://example.com/a", event_logger) == "http://example.com/a"

    @pytest.mark.parametrize("url", ["javascript:alert(1)", "ftp://example.com/file", "data:text/html,hi"])
    def test_rejects_other_schemes(self, url, event_logger):
        assert sanitize_url(url, event_logger) is None

    def test_rejects_unparseable(self, event_logger):
        assert sanitize_url("not a url", event_logger) is None

    def test_rejections_are_logged(self):
        sink_events = []
        event_logger = EventLogger(
            Settings(environment="production", enable_error_tracking=True),
            external_sink=sink_events.append
        )

        sanitize_url("ftp://example.com/file", event_logger)
        sanitize_url("not a url", event_logger)

        assert [event.message for event in sink_events] == ["Blocked non-HTTP(S) URL", "Invalid URL provided"]
        assert sink_events[0].data == {"url": "ftp://example.com/file"}


class TestValidateFileUpload:

    def test_valid_image(self):
        file = UploadedFile(name="avatar.PNG", size=1024, content_type="image/png")

        assert validate_file_upload(file).is_valid is True

    def test_jpeg_maps_to_jpg_extension(self):
        assert validate_file_upload(UploadedFile(name="photo.jpg", size=10, content_type="image/jpeg")).is_valid is True

        result = validate_file_upload(UploadedFile(name="photo.jpeg", size=10, content_type="image/jpeg"))
        assert result.error == "File extension not allowed"

    def test_too_large(self):
        file = UploadedFile(name="scan.pdf", size=5 * 1024 * 1024 + 1, content_type="application/pdf")

        result = validate_file_upload(file)

        assert result.is_valid is False
        assert result.error == "File size exceeds 5MB limit"

    def test_custom_size_limit(self):
        file = UploadedFile(name="scan.pdf", size=2 * 1024 * 1024, content_type="application/pdf")

        result = validate_file_upload(file, max_size=1024 * 1024)

        assert result.error == "File size exceeds 1MB limit"

    def test_type_not_allowed(self):
        file = UploadedFile(name="run.exe", size=10, content_type="application/x-msdownload")

        assert validate_file_upload(file).error == "File type not allowed"

    def test_extension_must_match_allowed_types(self):
        file = UploadedFile(name="report.exe", size=10, content_type="application/pdf")

        assert validate_file_upload(file).error == "File extension not allowed"

    def test_custom_allowed_types(self):
        file = UploadedFile(name="notes.txt", size=10, content_type="text/plain")

        assert validate_file_upload(file, allowed_types=["text/plain"]).error == "File extension not allowed"
        assert validate_file_upload(file, allowed_types=["text/txt"]).error == "File type not allowed"


class TestMaskSensitiveData:

    def test_masks_default_fields(self):
        data = {"email": "a@b.com", "password": "secret", "token": "abc", "creditCard": "4111"}

        masked = mask_sensitive_data(data)

        assert masked == {"email": "a@b.com", "password": MASK, "token": MASK, "creditCard": MASK}
        assert data["password"] == "secret"

    def test_empty_values_are_left(self):
        assert mask_sensitive_data({"password": ""}) == {"password": ""}

    def test_custom_fields(self):
        assert mask_sensitive_data({"pin": "1234", "password": "x"}, fields=["pin"]) == {"pin": MASK, "password": "x"}

    def test_non_mapping_unchanged(self):
        assert mask_sensitive_data("password") == "password"
        assert mask_sensitive_data(None) is None


def test_hash_data():
    digest = hash_data("fingerprint")

    assert digest == hashlib.sha256(b"fingerprint").hexdigest()
    assert len(digest) == 64
    assert hash_data("fingerprint") == digest


def test_generate_secure_random():
    token = generate_secure_random()

    assert len(token) == 64
    assert int(token, 16) >= 0
    assert len(generate_secure_random(8)) == 16
    assert generate_secure_random() != token


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
