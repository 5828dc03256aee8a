"""
Sentry initialization.

Sentry stays off unless ``SENTRY_DSN`` is set. Events are scrubbed of
credentials and contact details before they leave the process.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

HEALTH_PATHS = ("/health", "/api/health")

# Request body keys that never leave the process
SENSITIVE_FIELDS = ("password", "token", "email")


def _scrub_mapping(data: Any) -> None:
    if not isinstance(data, dict):
        return
    for key in list(data):
        if any(field in key.lower() for field in SENSITIVE_FIELDS):
            data[key] = "[Filtered]"


def _before_send(event: Event, hint: Hint) -> Event | None:
    """Strip user contact details, auth headers and credentials in bodies."""
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"

    request = event.get("request")
    if isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in ("Authorization", "authorization"):
                if name in headers:
                    headers[name] = "[Filtered]"
        _scrub_mapping(request.get("data"))

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    transaction = event.get("transaction", "")
    if any(transaction.endswith(path) for path in HEALTH_PATHS):
        return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Sample rate per request path.

    Auth, admin and AI traffic is sampled more heavily because failures there
    are either security relevant or depend on an upstream provider.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    path = sampling_context.get("asgi_scope", {}).get("path", "")
    if path in HEALTH_PATHS:
        return 0.0
    if path.startswith(("/api/auth", "/api/admin", "/api/ai")):
        return 0.5
    return 0.2


def init_sentry() -> bool:
    """
    Initialize the SDK; call before the FastAPI app is created.

    Returns:
        True when Sentry was enabled.
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
    return True
