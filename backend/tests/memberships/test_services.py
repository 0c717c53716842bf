"""
Tests for membership state machine helpers and transitions.
"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from django.utils import timezone

from apps.accounts.models import User
from apps.memberships.exceptions import InvalidMembershipTransition
from apps.memberships.services import (
    activate_membership,
    add_months,
    compute_membership_window,
    days_remaining,
    enter_grace_period,
    expire_membership,
    get_expiring_memberships,
    get_membership_stats,
    has_running_membership,
    revoke_membership,
)
from tests.accounts.factories import ActiveMemberFactory, UserFactory
from tests.packages.factories import PackageFactory

Status = User.MembershipStatus
UTC = ZoneInfo("UTC")


class TestAddMonths:
    @pytest.mark.parametrize(
        ("start", "months", "expected"),
        [
            (datetime(2024, 1, 15, 10, tzinfo=UTC), 1, datetime(2024, 2, 15, 10, tzinfo=UTC)),
            (datetime(2024, 1, 31, tzinfo=UTC), 1, datetime(2024, 2, 29, tzinfo=UTC)),
            (datetime(2023, 1, 31, tzinfo=UTC), 1, datetime(2023, 2, 28, tzinfo=UTC)),
            (datetime(2024, 8, 31, tzinfo=UTC), 6, datetime(2025, 2, 28, tzinfo=UTC)),
            (datetime(2024, 11, 30, tzinfo=UTC), 12, datetime(2025, 11, 30, tzinfo=UTC)),
            (datetime(2024, 3, 31, tzinfo=UTC), -1, datetime(2024, 2, 29, tzinfo=UTC)),
        ],
    )
    def test_calendar_months_clamped(self, start, months, expected) -> None:
        assert add_months(start, months) == expected


class TestMembershipWindow:
    def test_grace_end_is_five_days_after_end(self) -> None:
        start = datetime(2024, 1, 10, 8, 30, tzinfo=UTC)

        window = compute_membership_window(start, 6)

        assert window.start == start
        assert window.end == datetime(2024, 7, 10, 8, 30, tzinfo=UTC)
        assert window.grace_period_end == datetime(2024, 7, 15, 8, 30, tzinfo=UTC)


class TestDaysRemaining:
    def test_rounds_up(self) -> None:
        now = timezone.now()
        user = User(membership_end_date=now + timedelta(days=2, minutes=1))

        assert days_remaining(user, now) == 3

    def test_past_or_unset_is_zero(self) -> None:
        now = timezone.now()

        assert days_remaining(User(membership_end_date=now - timedelta(days=1)), now) == 0
        assert days_remaining(User(), now) == 0

    def test_has_running_membership(self) -> None:
        now = timezone.now()
        running = User(membership_status=Status.ACTIVE, membership_end_date=now + timedelta(hours=1))
        lapsed = User(membership_status=Status.ACTIVE, membership_end_date=now - timedelta(hours=1))
        grace = User(membership_status=Status.GRACE_PERIOD, membership_end_date=now + timedelta(hours=1))

        assert has_running_membership(running, now) is True
        assert has_running_membership(lapsed, now) is False
        assert has_running_membership(grace, now) is False


@pytest.mark.django_db
class TestTransitions:
    @pytest.mark.parametrize(
        "status", [Status.INACTIVE, Status.ACTIVE, Status.GRACE_PERIOD, Status.EXPIRED]
    )
    def test_activate_from_any_state(self, status) -> None:
        user = UserFactory.create(membership_status=status)
        package = PackageFactory.create()
        now = timezone.now()
        window = compute_membership_window(now, package.duration_months)

        activate_membership(user, package, window, paid_at=now)
        user.refresh_from_db()

        assert user.membership_status == Status.ACTIVE
        assert user.membership_package_id == package.pk
        assert user.membership_plan == package.category
        assert user.membership_end_date == window.end
        assert user.grace_period_end_date == window.grace_period_end
        assert user.last_payment_date == now

    def test_enter_grace_period_only_from_active(self) -> None:
        user = ActiveMemberFactory.create()

        enter_grace_period(user)

        assert User.objects.get(pk=user.pk).membership_status == Status.GRACE_PERIOD
        with pytest.raises(InvalidMembershipTransition):
            enter_grace_period(user)

    def test_expire_only_from_grace_period(self) -> None:
        user = ActiveMemberFactory.create()

        with pytest.raises(InvalidMembershipTransition):
            expire_membership(user)

        user.membership_status = Status.GRACE_PERIOD
        expire_membership(user)
        assert User.objects.get(pk=user.pk).membership_status == Status.EXPIRED

    def test_revoke_skips_grace_period(self) -> None:
        user = ActiveMemberFactory.create()

        revoke_membership(user)

        assert User.objects.get(pk=user.pk).membership_status == Status.EXPIRED

    def test_revoke_requires_active(self) -> None:
        user = UserFactory.create()

        with pytest.raises(InvalidMembershipTransition) as exc_info:
            revoke_membership(user)

        assert exc_info.value.current == Status.INACTIVE
        assert exc_info.value.target == Status.EXPIRED

    def test_failed_transition_leaves_row_untouched(self) -> None:
        user = UserFactory.create(membership_status=Status.EXPIRED)

        with pytest.raises(InvalidMembershipTransition):
            enter_grace_period(user)

        assert User.objects.get(pk=user.pk).membership_status == Status.EXPIRED


@pytest.mark.django_db
class TestMembershipReports:
    def test_stats(self) -> None:
        now = timezone.now()
        ActiveMemberFactory.create(membership_end_date=now + timedelta(days=3))
        ActiveMemberFactory.create(membership_end_date=now + timedelta(days=60))
        ActiveMemberFactory.create(membership_status=Status.GRACE_PERIOD)
        ActiveMemberFactory.create(membership_status=Status.EXPIRED)
        UserFactory.create()

        stats = get_membership_stats(now)

        assert stats.total_members == 4
        assert stats.active_members == 2
        assert stats.grace_period_members == 1
        assert stats.expired_members == 1
        assert stats.expiring_soon == 1

    def test_expiring_memberships_sorted(self) -> None:
        now = timezone.now()
        later = ActiveMemberFactory.create(membership_end_date=now + timedelta(days=6))
        sooner = ActiveMemberFactory.create(membership_end_date=now + timedelta(days=2))
        ActiveMemberFactory.create(membership_end_date=now + timedelta(days=20))

        result = list(get_expiring_memberships(days=7, now=now))

        assert result == [sooner, later]
