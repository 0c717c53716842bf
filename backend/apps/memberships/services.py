"""
Membership state machine.

    inactive/expired --(payment success)--> active
    active --(end date passed, sweep)--> grace_period
    grace_period --(grace end passed, sweep)--> expired
    active --(chargeback)--> expired

Transition functions expect the caller to hold the user row
(select_for_update inside transaction.atomic) and only write the
membership fields they own. Capacity counters are handled by the caller
in the same transaction.
"""

import calendar
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from django.db.models import Q
from django.db.models.query import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.core.logging import get_logger
from apps.memberships.exceptions import InvalidMembershipTransition

if TYPE_CHECKING:
    from apps.packages.models import Package

logger = get_logger(__name__)

GRACE_PERIOD_DAYS = 5

Status = User.MembershipStatus


@dataclass(frozen=True)
class MembershipWindow:
    start: datetime
    end: datetime
    grace_period_end: datetime


@dataclass
class MembershipStats:
    total_members: int
    active_members: int
    grace_period_members: int
    expired_members: int
    expiring_soon: int


def add_months(value: datetime, months: int) -> datetime:
    """
    Add calendar months, clamping the day to the end of the target month.

    31 Jan + 1 month -> 28/29 Feb.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def compute_membership_window(start: datetime, duration_months: int) -> MembershipWindow:
    end = add_months(start, duration_months)
    return MembershipWindow(
        start=start,
        end=end,
        grace_period_end=end + timedelta(days=GRACE_PERIOD_DAYS),
    )


def days_remaining(user: User, now: datetime | None = None) -> int:
    """Whole days (rounded up) until the membership end date; 0 when past or unset."""
    if user.membership_end_date is None:
        return 0
    now = now or timezone.now()
    seconds = (user.membership_end_date - now).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / 86400)


def has_running_membership(user: User, now: datetime | None = None) -> bool:
    """Active status with an end date still in the future."""
    now = now or timezone.now()
    return (
        user.membership_status == Status.ACTIVE
        and user.membership_end_date is not None
        and user.membership_end_date > now
    )


def _transition(user: User, allowed: tuple[str, ...], target: str) -> str:
    current = user.membership_status
    if current not in allowed:
        raise InvalidMembershipTransition(current, target)
    user.membership_status = target
    logger.info(
        "membership_transition",
        from_status=current,
        to_status=target,
        **{"usr.id": user.pk},
    )
    return current


def activate_membership(
    user: User,
    package: "Package",
    window: MembershipWindow,
    paid_at: datetime,
) -> None:
    """
    Start (or restart) a membership after a successful payment.

    Any state may be activated; an active member whose end date already
    passed can renew before the sweep moves them to grace period.
    """
    _transition(
        user,
        (Status.INACTIVE, Status.ACTIVE, Status.GRACE_PERIOD, Status.EXPIRED),
        Status.ACTIVE,
    )
    user.membership_package = package
    user.membership_plan = package.category
    user.membership_start_date = window.start
    user.membership_end_date = window.end
    user.grace_period_end_date = window.grace_period_end
    user.last_payment_date = paid_at
    user.save(
        update_fields=[
            "membership_status",
            "membership_package",
            "membership_plan",
            "membership_start_date",
            "membership_end_date",
            "grace_period_end_date",
            "last_payment_date",
            "updated_at",
        ]
    )


def enter_grace_period(user: User) -> None:
    """active -> grace_period. The member keeps their package slot."""
    _transition(user, (Status.ACTIVE,), Status.GRACE_PERIOD)
    user.save(update_fields=["membership_status", "updated_at"])


def expire_membership(user: User) -> None:
    """grace_period -> expired. Caller releases the package slot."""
    _transition(user, (Status.GRACE_PERIOD,), Status.EXPIRED)
    user.save(update_fields=["membership_status", "updated_at"])


def revoke_membership(user: User) -> None:
    """active -> expired directly, skipping grace period (chargeback)."""
    _transition(user, (Status.ACTIVE,), Status.EXPIRED)
    user.save(update_fields=["membership_status", "updated_at"])


def get_membership_stats(now: datetime | None = None) -> MembershipStats:
    now = now or timezone.now()
    users = User.objects.all()
    return MembershipStats(
        total_members=users.exclude(membership_status=Status.INACTIVE).count(),
        active_members=users.filter(membership_status=Status.ACTIVE).count(),
        grace_period_members=users.filter(membership_status=Status.GRACE_PERIOD).count(),
        expired_members=users.filter(membership_status=Status.EXPIRED).count(),
        expiring_soon=users.filter(
            membership_status=Status.ACTIVE,
            membership_end_date__gte=now,
            membership_end_date__lte=now + timedelta(days=7),
        ).count(),
    )


def get_expiring_memberships(days: int = 7, now: datetime | None = None) -> QuerySet[User]:
    """Active members whose end date falls within the next N days, soonest first."""
    now = now or timezone.now()
    return (
        User.objects.filter(
            Q(membership_end_date__gte=now) & Q(membership_end_date__lte=now + timedelta(days=days)),
            membership_status=Status.ACTIVE,
        )
        .select_related("membership_package")
        .order_by("membership_end_date")
    )
