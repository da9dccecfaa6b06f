"""Duration parsing for interval settings."""

from __future__ import annotations

import re
from typing import Any

_UNITS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_FULL = re.compile(r"(?:\d+(?:\.\d+)?(?:ms|s|m|h))+")


def parse_duration(value: Any) -> float:
    """Parse a duration into seconds.

    Accepts a plain number of seconds or a string of ``<number><unit>``
    groups such as ``30s``, ``1m30s`` or ``500ms``.

    Args:
        value: Raw configuration value

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    text = value.strip().lower()
    try:
        return float(text)
    except ValueError:
        pass

    if not _FULL.fullmatch(text):
        raise ValueError(f"invalid duration: {value!r}")

    return sum(float(amount) * _UNITS[unit] for amount, unit in _PART.findall(text))
