# projectdollar/utils/context.py
"""
Request context for log correlation.

The correlation ID lives in a ContextVar so it follows a request through
every await, including price lookups fanned out with asyncio.gather (tasks
copy the current context when they are created).

Usage:
    from projectdollar.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")
    get_correlation_id()  # "abc-123"
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Return the current request's correlation ID, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current context (called by middleware)."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Unbind the correlation ID at the end of a request."""
    _correlation_id_var.set(None)
