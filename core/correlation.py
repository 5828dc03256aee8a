"""
Request correlation ids.

Every request gets a short id that shows up in log lines, error bodies and
Sentry tags, so a user-reported failure can be matched to the server logs.
"""

import re
import uuid
from contextvars import ContextVar

CORRELATION_HEADER = "X-Correlation-ID"

# Incoming ids are echoed into logs and headers, so keep them tame
_VALID_INCOMING_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Return 8 hex characters, short enough to read out over the phone."""
    return uuid.uuid4().hex[:8]


def resolve_correlation_id(incoming: str | None) -> str:
    """
    Reuse the client-supplied id when it looks sane, otherwise mint one.

    Args:
        incoming: Value of the ``X-Correlation-ID`` request header, if any.

    Returns:
        The id to use for the current request.
    """
    if incoming and _VALID_INCOMING_ID.match(incoming):
        return incoming
    return generate_correlation_id()


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)
