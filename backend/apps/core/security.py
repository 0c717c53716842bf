"""
Core security - authentication helpers for API endpoints.

Sessions are issued by Django's auth stack; the API only consumes them.
"""

from collections.abc import Callable
from functools import wraps
from typing import TYPE_CHECKING, Any

from django.http import HttpRequest
from ninja.errors import HttpError
from ninja.security import SessionAuth

if TYPE_CHECKING:
    from apps.accounts.models import User


class MemberSessionAuth(SessionAuth):
    """
    Session cookie authentication for gym members and staff.

    On success ninja sets request.auth to the authenticated User.
    """

    def authenticate(self, request: HttpRequest, key: str | None) -> "User | None":
        user = super().authenticate(request, key)
        if user is not None and not user.is_active:
            return None
        return user


def get_auth_user(request: HttpRequest) -> "User":
    """
    Return the authenticated user for the request or raise 401.

    Endpoints call this instead of reading request.auth directly so that
    unit tests which build requests by hand get the same behaviour.
    """
    user = getattr(request, "auth", None)
    if user is None or not getattr(user, "is_authenticated", False):
        raise HttpError(401, "Not authenticated")
    return user


def require_staff(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator restricting an endpoint to staff users (401/403 otherwise)."""

    @wraps(func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        user = get_auth_user(request)
        if not user.is_staff:
            raise HttpError(403, "Staff access required")
        return func(request, *args, **kwargs)

    return wrapper
