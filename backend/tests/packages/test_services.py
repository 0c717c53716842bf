"""
Tests for package catalog services and the capacity counter.
"""

from unittest.mock import patch

import pytest

from apps.accounts.models import User
from apps.packages.models import Package
from apps.packages.services import (
    get_package_stats,
    increment_members,
    list_packages,
    release_member,
)
from tests.accounts.factories import ActiveMemberFactory
from tests.packages.factories import PackageFactory


@pytest.mark.django_db
class TestListPackages:
    def test_filters(self) -> None:
        basic = PackageFactory.create(category=Package.Category.BASIC, price=1500)
        premium = PackageFactory.create()
        PackageFactory.create(is_active=False)

        assert list(list_packages(active=True)) == [basic, premium]
        assert list(list_packages(category=Package.Category.BASIC)) == [basic]


@pytest.mark.django_db
class TestCapacityCounter:
    def test_increment(self) -> None:
        package = PackageFactory.create(current_members=2)

        increment_members(package.pk)

        package.refresh_from_db()
        assert package.current_members == 3

    def test_increment_past_capacity_is_logged(self) -> None:
        package = PackageFactory.create(max_members=1, current_members=1)

        with patch("apps.packages.services.logger") as mock_logger:
            assert increment_members(package.pk) == 2

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == "package_over_capacity"

    def test_increment_within_capacity_not_flagged(self) -> None:
        package = PackageFactory.create(max_members=2, current_members=1)

        with patch("apps.packages.services.logger") as mock_logger:
            assert increment_members(package.pk) == 2

        mock_logger.warning.assert_not_called()

    def test_release(self) -> None:
        package = PackageFactory.create(current_members=2)

        assert release_member(package.pk) is True

        package.refresh_from_db()
        assert package.current_members == 1

    def test_release_never_goes_negative(self) -> None:
        package = PackageFactory.create(current_members=0)

        assert release_member(package.pk) is False

        package.refresh_from_db()
        assert package.current_members == 0


@pytest.mark.django_db
class TestPackageStats:
    def test_counts_by_status(self) -> None:
        package = PackageFactory.create(max_members=10, current_members=3)
        ActiveMemberFactory.create_batch(2, membership_package=package)
        ActiveMemberFactory.create(
            membership_package=package, membership_status=User.MembershipStatus.GRACE_PERIOD
        )
        ActiveMemberFactory.create(
            membership_package=package, membership_status=User.MembershipStatus.EXPIRED
        )
        ActiveMemberFactory.create()

        stats = get_package_stats(package)

        assert stats.active_members == 2
        assert stats.grace_period_members == 1
        assert stats.expired_members == 1
        assert stats.total_members == 4
        assert stats.available_slots == 7
