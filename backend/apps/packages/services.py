"""
Package catalog services.

increment_members/release_member are the only writers of
Package.current_members. Each is a single UPDATE with an F() expression,
so callers get atomic counter changes inside whatever transaction they
already hold.
"""

from dataclasses import dataclass

from django.db.models import Count, F, Q, QuerySet

from apps.core.logging import get_logger
from apps.packages.models import Package

logger = get_logger(__name__)


@dataclass
class PackageStats:
    """Member counts for one package, grouped by membership status."""

    active_members: int
    grace_period_members: int
    expired_members: int
    total_members: int
    available_slots: int | None


def list_packages(active: bool | None = None, category: str | None = None) -> QuerySet[Package]:
    """List packages, optionally filtered by active flag and category."""
    queryset = Package.objects.all()
    if active is not None:
        queryset = queryset.filter(is_active=active)
    if category:
        queryset = queryset.filter(category=category)
    return queryset.order_by("category", "price")


def get_package(package_id: int) -> Package:
    """Fetch a package by id. Raises Package.DoesNotExist."""
    return Package.objects.get(pk=package_id)


def get_package_stats(package: Package) -> PackageStats:
    """Count users on this package per membership status."""
    from apps.accounts.models import User

    counts = User.objects.filter(membership_package=package).aggregate(
        active=Count("pk", filter=Q(membership_status=User.MembershipStatus.ACTIVE)),
        grace=Count("pk", filter=Q(membership_status=User.MembershipStatus.GRACE_PERIOD)),
        expired=Count("pk", filter=Q(membership_status=User.MembershipStatus.EXPIRED)),
    )
    return PackageStats(
        active_members=counts["active"],
        grace_period_members=counts["grace"],
        expired_members=counts["expired"],
        total_members=counts["active"] + counts["grace"] + counts["expired"],
        available_slots=package.available_slots,
    )


def increment_members(package_id: int) -> int:
    """
    Take one capacity slot for a newly activated membership.

    A confirmed payment is never refused, so two checkouts racing for the
    last slot can push the count past max_members; that is logged as
    package_over_capacity for staff to resolve. Returns the new count.
    """
    Package.objects.filter(pk=package_id).update(current_members=F("current_members") + 1)
    current, limit = Package.objects.filter(pk=package_id).values_list(
        "current_members", "max_members"
    ).get()
    if limit is not None and current > limit:
        logger.warning(
            "package_over_capacity",
            package_id=package_id,
            current_members=current,
            max_members=limit,
        )
    else:
        logger.debug("package_member_added", package_id=package_id)
    return current


def release_member(package_id: int) -> bool:
    """
    Give back one capacity slot.

    Never goes below zero: the row is only updated while current_members > 0.
    Returns False when there was nothing to release.
    """
    updated = Package.objects.filter(pk=package_id, current_members__gt=0).update(
        current_members=F("current_members") - 1
    )
    if not updated:
        logger.warning("package_member_release_skipped", package_id=package_id)
        return False
    logger.debug("package_member_released", package_id=package_id)
    return True
