"""Error taxonomy and sanitization utilities."""

from __future__ import annotations

import re
from typing import Any

from ..constants import (
    ERROR_KIND_MISMATCH,
    ERROR_KIND_RESTORE_WITHOUT_VERSION,
    ERROR_KIND_TRANSPORT,
    ERROR_KIND_UNEXPECTED,
    ERROR_LABEL_CONTENT_MISMATCH,
    ERROR_LABEL_RESTORE_WITHOUT_VERSION,
)


class ProbeError(Exception):
    """Base class for every error raised by the exporter."""

    kind = ERROR_KIND_UNEXPECTED

    @property
    def label(self) -> str:
        return type(self).__name__


class ConfigError(ProbeError):
    """Missing or invalid configuration. Fatal at startup."""


class BootstrapError(ProbeError):
    """First-run setup failed. Fatal to the first-run invocation."""


class TransportError(ProbeError):
    """Network, auth or store-side failure on an object store call."""

    kind = ERROR_KIND_TRANSPORT

    def __init__(self, operation: str, code: str, message: str) -> None:
        super().__init__(f"unable to {operation}: {message}")
        self.operation = operation
        self.code = code

    @property
    def label(self) -> str:
        return self.code


class ObjectNotFoundError(TransportError):
    """The requested object (or version) does not exist."""


class MismatchError(ProbeError):
    """The store answered the read but returned different bytes."""

    kind = ERROR_KIND_MISMATCH

    def __init__(self, expected_size: int, actual_size: int) -> None:
        super().__init__(
            f"downloaded file content mismatch (expected {expected_size} bytes, got {actual_size})"
        )
        self.expected_size = expected_size
        self.actual_size = actual_size

    @property
    def label(self) -> str:
        return ERROR_LABEL_CONTENT_MISMATCH


class RestoreWithoutVersionError(ProbeError):
    """Restore was attempted but no previous version id is known."""

    kind = ERROR_KIND_RESTORE_WITHOUT_VERSION

    def __init__(self, key: str) -> None:
        super().__init__(
            f"cannot restore '{key}': no version id was captured before delete "
            "(is versioning enabled on the bucket?)"
        )
        self.key = key

    @property
    def label(self) -> str:
        return ERROR_LABEL_RESTORE_WITHOUT_VERSION


def classify_error(error: BaseException) -> tuple[str, str]:
    """Return the ``(kind, label)`` pair used to report an error.

    Args:
        error: Exception raised by a probe step

    Returns:
        Error kind and short label
    """
    if isinstance(error, ProbeError):
        return error.kind, error.label
    return ERROR_KIND_UNEXPECTED, type(error).__name__


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"access[_\s]?key[_\s]?id[:\s=]+([A-Z0-9]{16,128})",
    r"secret[_\s]?access[_\s]?key[:\s=]+([A-Za-z0-9/+=]{20,})",
    r"session[_\s]?token[:\s=]+([A-Za-z0-9/+=]+)",
    r"X-Amz-Credential=([^&\s]+)",
    r"X-Amz-Signature=([^&\s]+)",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "api_key",
    "access_key",
    "secret_access_key",
    "secret_key",
    "session_token",
    "password",
    "credentials",
    "token",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove credentials.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(
            pattern,
            lambda m: m.group(0).replace(m.group(1), "[REDACTED]"),
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: BaseException) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        if key.lower() in all_sensitive:
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
