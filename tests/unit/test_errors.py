"""Tests for the error taxonomy and sanitization."""

from __future__ import annotations

from s3rw_exporter.utils.errors import (
    BootstrapError,
    ConfigError,
    MismatchError,
    ObjectNotFoundError,
    RestoreWithoutVersionError,
    TransportError,
    classify_error,
    sanitize_dict,
    sanitize_error_message,
)


class TestClassifyError:
    """Test error kind and label classification."""

    def test_transport(self) -> None:
        """Test transport errors are labeled with the store error code."""
        assert classify_error(TransportError("upload file", "AccessDenied", "denied")) == ("transport", "AccessDenied")

    def test_not_found_is_transport(self) -> None:
        """Test not-found keeps the transport kind."""
        assert classify_error(ObjectNotFoundError("download file", "NoSuchKey", "missing")) == ("transport", "NoSuchKey")

    def test_mismatch(self) -> None:
        """Test mismatch classification."""
        assert classify_error(MismatchError(3, 3)) == ("mismatch", "content_mismatch")

    def test_restore_without_version(self) -> None:
        """Test restore-without-version has its own kind."""
        error = RestoreWithoutVersionError("key")
        assert classify_error(error) == ("restore_without_version", "restore_without_version")
        assert "versioning" in str(error)

    def test_unexpected(self) -> None:
        """Test foreign exceptions are classified as unexpected."""
        assert classify_error(KeyError("x")) == ("unexpected", "KeyError")

    def test_fatal_errors_are_not_steady_state_kinds(self) -> None:
        """Test config and bootstrap errors are not transport errors."""
        assert not isinstance(ConfigError("x"), TransportError)
        assert not isinstance(BootstrapError("x"), TransportError)


class TestSanitization:
    """Test secret redaction."""

    def test_sanitize_secret_access_key(self) -> None:
        """Test secret keys are redacted from messages."""
        message = "failed with secret_access_key=wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY"
        sanitized = sanitize_error_message(message)
        assert "wJalrXUtnFEMI" not in sanitized
        assert "[REDACTED]" in sanitized

    def test_sanitize_presigned_signature(self) -> None:
        """Test presigned URL signatures are redacted."""
        sanitized = sanitize_error_message("GET /key?X-Amz-Signature=abcdef0123&X-Amz-Credential=AKIA/2024")
        assert "abcdef0123" not in sanitized
        assert "AKIA/2024" not in sanitized

    def test_plain_message_unchanged(self) -> None:
        """Test messages without secrets pass through."""
        assert sanitize_error_message("An error occurred (NoSuchKey)") == "An error occurred (NoSuchKey)"

    def test_sanitize_dict(self) -> None:
        """Test sensitive keys are redacted recursively."""
        data = {"s3": {"api_key": "AKIA", "secret_access_key": "secret", "bucket": "probe"}}
        assert sanitize_dict(data) == {
            "s3": {"api_key": "[REDACTED]", "secret_access_key": "[REDACTED]", "bucket": "probe"}
        }
