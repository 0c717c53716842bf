"""
Core utility functions.
"""

from typing import cast

from django.http import HttpRequest


def get_client_ip(request: HttpRequest, default: str | None = None) -> str | None:
    """
    Extract client IP from X-Forwarded-For or REMOTE_ADDR.

    When X-Forwarded-For carries a proxy chain the first entry is the
    original client.
    """
    x_forwarded_for: str | None = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    remote_addr = cast(str | None, request.META.get("REMOTE_ADDR"))
    if remote_addr is not None:
        return remote_addr
    return default


def get_user_agent(request: HttpRequest) -> str:
    """Return the request's User-Agent header, truncated to fit the metadata column."""
    return request.headers.get("User-Agent", "")[:512]
