"""Correlation id propagation across async boundaries."""

import contextvars
import uuid

CORRELATION_HEADER = "X-Correlation-ID"
LEGACY_CORRELATION_HEADER = "Correlation-ID"

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def new_correlation_id() -> str:
    """Generate a fresh version-4 correlation id."""
    return str(uuid.uuid4())


def resolve_correlation_id(headers) -> tuple[str, bool]:
    """
    Pick the correlation id for an inbound request.

    Args:
        headers: Case-insensitive header mapping of the request

    Returns:
        Tuple of (correlation_id, supplied_by_client)
    """
    supplied = headers.get(CORRELATION_HEADER) or headers.get(
        LEGACY_CORRELATION_HEADER
    )
    if supplied:
        return supplied, True
    return new_correlation_id(), False


def get_correlation_id() -> str | None:
    """Correlation id of the request being handled, if any."""
    return _correlation_id.get()


def set_correlation_id(value: str | None) -> contextvars.Token:
    """Bind a correlation id to the current context."""
    return _correlation_id.set(value)


def reset_correlation_id(token: contextvars.Token) -> None:
    """Restore the previous binding."""
    _correlation_id.reset(token)
