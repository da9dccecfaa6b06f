"""Utility functions for the S3 read/write exporter."""

from .context import get_context_dict, get_cycle_id, new_cycle_id, with_cycle_id
from .durations import parse_duration
from .errors import (
    BootstrapError,
    ConfigError,
    MismatchError,
    ObjectNotFoundError,
    ProbeError,
    RestoreWithoutVersionError,
    TransportError,
    classify_error,
    sanitize_dict,
    sanitize_error_message,
    sanitize_exception,
)

__all__ = [
    "ProbeError",
    "ConfigError",
    "BootstrapError",
    "TransportError",
    "ObjectNotFoundError",
    "MismatchError",
    "RestoreWithoutVersionError",
    "classify_error",
    "sanitize_error_message",
    "sanitize_exception",
    "sanitize_dict",
    "parse_duration",
    "new_cycle_id",
    "get_cycle_id",
    "with_cycle_id",
    "get_context_dict",
]
