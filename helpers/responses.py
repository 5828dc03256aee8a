"""
Response envelope shared by every route: ``{success, message?, data?}``.

Pydantic models placed in ``data`` are serialized by FastAPI with their
camelCase aliases.
"""

from typing import Any, Optional


def api_response(data: Any = None, message: Optional[str] = None) -> dict:
    """Wrap a successful result in the standard envelope."""
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def error_body(message: str, correlation_id: str, **extra: Any) -> dict:
    """Envelope used by the exception handlers."""
    return {
        "success": False,
        "message": message,
        "correlationId": correlation_id,
        **extra,
    }
