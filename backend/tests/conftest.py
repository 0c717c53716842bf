"""
Shared pytest fixtures for all tests.

Factories
---------
Import factories directly from their modules:

    from tests.accounts.factories import UserFactory, ActiveMemberFactory
    from tests.packages.factories import PackageFactory
    from tests.payments.factories import PaymentFactory, build_notification
    from tests.notifications.factories import NotificationFactory

Example usage:

    @pytest.mark.django_db
    def test_something():
        package = PackageFactory.create(max_members=1)
        user = UserFactory.create(email="member@example.com")
"""

from collections.abc import Callable
from typing import Any

import pytest
from django.http import HttpRequest
from django.test import Client, RequestFactory
from django.test.client import WSGIRequest  # type: ignore[attr-defined]

from apps.accounts.models import User


class MockRequest(HttpRequest):
    """
    HttpRequest subclass for tests that allows setting auth attribute.

    Example:
        request = MockRequest()
        request.auth = user
    """

    auth: Any


def make_request_with_auth(request: "WSGIRequest", user: User | None) -> HttpRequest:
    """
    Set request.auth the way MemberSessionAuth does after a session login.

    Example:
        request = request_factory.get("/api/v1/memberships/me")
        request = make_request_with_auth(request, user)
    """
    request.auth = user  # type: ignore[attr-defined]
    request.user = user  # type: ignore[attr-defined]
    return request


@pytest.fixture
def request_factory() -> RequestFactory:
    """
    Django request factory for unit testing views.

    Use this when you need to call endpoint functions directly without going
    through routing and authentication.
    """
    return RequestFactory()


@pytest.fixture
def api_client() -> Client:
    """
    Django test client for full HTTP request/response cycle tests.

    Example:
        def test_api_returns_200(api_client):
            response = api_client.get("/api/v1/health")
            assert response.status_code == 200
    """
    return Client()


@pytest.fixture
def member_client() -> Callable[..., Client]:
    """
    Factory fixture returning a test client logged in as the given user.

    Example:
        def test_me(member_client):
            client = member_client(UserFactory.create())
            response = client.get("/api/v1/accounts/me")
    """

    def _client(user: User) -> Client:
        client = Client()
        client.force_login(user)
        return client

    return _client


@pytest.fixture
def authenticated_request(request_factory: RequestFactory) -> Callable[..., HttpRequest]:
    """
    Factory fixture for creating requests with request.auth set.

    Example:
        def test_endpoint(authenticated_request):
            request = authenticated_request(staff_user, method="get", path="/")
            result = my_endpoint(request)
    """

    def _make_request(
        user: User,
        method: str = "get",
        path: str = "/",
        data: dict | None = None,
        content_type: str = "application/json",
    ) -> HttpRequest:
        method_func = getattr(request_factory, method.lower())
        kwargs: dict[str, Any] = {}
        if data is not None:
            kwargs["data"] = data
            kwargs["content_type"] = content_type
        return make_request_with_auth(method_func(path, **kwargs), user)

    return _make_request
