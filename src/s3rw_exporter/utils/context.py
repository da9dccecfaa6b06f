"""Correlation id propagation for probe cycles."""

from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

# Context variable for storing the current cycle id
cycle_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cycle_id", default=None
)


def new_cycle_id() -> str:
    """Generate a short id for one probe cycle."""
    return uuid.uuid4().hex[:12]


def get_cycle_id() -> str | None:
    """Get the cycle id from the current context.

    Returns:
        Cycle id if set, None otherwise
    """
    return cycle_id.get()


@contextmanager
def with_cycle_id(value: str | None = None) -> Iterator[str]:
    """Context manager to set a cycle id for the duration of a block.

    Args:
        value: Cycle id to use, generated when omitted

    Yields:
        The cycle id
    """
    value = value or new_cycle_id()
    token = cycle_id.set(value)
    try:
        yield value
    finally:
        cycle_id.reset(token)


def get_context_dict(additional: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get a dictionary of context values.

    Args:
        additional: Additional key-value pairs to include

    Returns:
        Dictionary with context values including cycle_id
    """
    ctx: dict[str, Any] = {}

    current = get_cycle_id()
    if current:
        ctx["cycle_id"] = current

    if additional:
        ctx.update(additional)

    return ctx
