"""
Tests for membership API endpoints.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.accounts.models import User
from apps.memberships.sweeper import start_of_day
from tests.accounts.factories import ActiveMemberFactory, StaffFactory, UserFactory

BASE = "/api/v1/memberships"


@pytest.mark.django_db
class TestMyMembership:
    def test_requires_login(self, api_client) -> None:
        assert api_client.get(f"{BASE}/me").status_code == 401

    def test_active_member(self, member_client) -> None:
        user = ActiveMemberFactory.create(membership_end_date=timezone.now() + timedelta(days=9, hours=1))

        response = member_client(user).get(f"{BASE}/me")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "active"
        assert body["package_id"] == user.membership_package_id
        assert body["package_name"] == user.membership_package.name
        assert body["days_remaining"] == 10

    def test_member_without_membership(self, member_client) -> None:
        response = member_client(UserFactory.create()).get(f"{BASE}/me")

        body = response.json()
        assert body["status"] == "inactive"
        assert body["package_id"] is None
        assert body["days_remaining"] == 0


@pytest.mark.django_db
class TestStaffEndpoints:
    def test_stats_forbidden_for_members(self, member_client) -> None:
        assert member_client(UserFactory.create()).get(f"{BASE}/stats").status_code == 403

    def test_stats(self, member_client) -> None:
        ActiveMemberFactory.create()
        ActiveMemberFactory.create(membership_status=User.MembershipStatus.EXPIRED)

        response = member_client(StaffFactory.create()).get(f"{BASE}/stats")

        assert response.status_code == 200
        assert response.json()["active_members"] == 1
        assert response.json()["expired_members"] == 1

    def test_expiring(self, member_client) -> None:
        soon = ActiveMemberFactory.create(membership_end_date=timezone.now() + timedelta(days=2))
        ActiveMemberFactory.create(membership_end_date=timezone.now() + timedelta(days=40))

        response = member_client(StaffFactory.create()).get(f"{BASE}/expiring", {"days": 7})

        body = response.json()
        assert body["count"] == 1
        assert body["members"][0]["user_id"] == soon.pk

    def test_manual_sweep(self, member_client) -> None:
        today = start_of_day(timezone.now())
        user = ActiveMemberFactory.create(membership_end_date=today - timedelta(days=1))

        response = member_client(StaffFactory.create()).post(
            f"{BASE}/sweep", data={}, content_type="application/json"
        )

        user.refresh_from_db()
        assert response.status_code == 200
        assert response.json()["expired"] == 1
        assert user.membership_status == User.MembershipStatus.GRACE_PERIOD

    def test_manual_sweep_dry_run(self, member_client) -> None:
        today = start_of_day(timezone.now())
        user = ActiveMemberFactory.create(membership_end_date=today - timedelta(days=1))

        response = member_client(StaffFactory.create()).post(
            f"{BASE}/sweep", data={"dry_run": True}, content_type="application/json"
        )

        user.refresh_from_db()
        assert response.json()["dry_run"] is True
        assert user.membership_status == User.MembershipStatus.ACTIVE

    def test_sweep_forbidden_for_members(self, member_client) -> None:
        response = member_client(UserFactory.create()).post(
            f"{BASE}/sweep", data={}, content_type="application/json"
        )

        assert response.status_code == 403
