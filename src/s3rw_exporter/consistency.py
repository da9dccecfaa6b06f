"""Content integrity check for downloaded objects."""

from __future__ import annotations

from .utils.errors import MismatchError


def verify(expected: bytes, actual: bytes) -> None:
    """Compare downloaded bytes with the expected fixture, byte for byte.

    Raises:
        MismatchError: If the content differs in any way
    """
    if expected != actual:
        raise MismatchError(expected_size=len(expected), actual_size=len(actual))
