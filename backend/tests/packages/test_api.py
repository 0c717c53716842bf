"""
Tests for package catalog endpoints.
"""

import pytest

from tests.accounts.factories import StaffFactory, UserFactory
from tests.packages.factories import PackageFactory

BASE = "/api/v1/packages"


@pytest.mark.django_db
class TestPackagesApi:
    def test_list_is_public(self, api_client) -> None:
        PackageFactory.create()
        PackageFactory.create(is_active=False)

        response = api_client.get(f"{BASE}/", {"active": "true"})

        body = response.json()
        assert response.status_code == 200
        assert body["count"] == 1
        assert body["packages"][0]["discounted_price"] == "8010.00"

    def test_detail(self, api_client) -> None:
        package = PackageFactory.create(max_members=5, current_members=5)

        body = api_client.get(f"{BASE}/{package.pk}").json()

        assert body["id"] == package.pk
        assert body["available_slots"] == 0
        assert body["is_available"] is False

    def test_detail_not_found(self, api_client) -> None:
        assert api_client.get(f"{BASE}/999999").status_code == 404

    def test_stats_staff_only(self, member_client) -> None:
        package = PackageFactory.create()

        assert member_client(UserFactory.create()).get(f"{BASE}/{package.pk}/stats").status_code == 403

        response = member_client(StaffFactory.create()).get(f"{BASE}/{package.pk}/stats")
        assert response.status_code == 200
        assert response.json()["total_members"] == 0
