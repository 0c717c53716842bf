"""
Daily membership lifecycle sweep.

One entry point, run_sweep(), executes the passes in a fixed order:

1. grace period ends tomorrow -> final warning (no state change)
2. grace period ended        -> expired, package slot released
3. end date passed           -> grace_period (slot kept)
4. reminders N days ahead    -> one pass per lead time
5. stale pending payments    -> cancelled (only when configured)

Later passes rely on earlier ones: a member moved to grace period in pass 3
must not be suspended in pass 2 of the same run. Every user is processed on
its own; a failure is logged and counted and the batch carries on.
"""

from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.core.logging import get_logger
from apps.memberships.services import (
    GRACE_PERIOD_DAYS,
    enter_grace_period,
    expire_membership,
)
from apps.notifications.email import EmailTemplate, dispatch_email
from apps.notifications.models import Notification
from apps.notifications.services import notify
from apps.packages.services import release_member

logger = get_logger(__name__)

Status = User.MembershipStatus

DEFAULT_REMINDER_DAYS = (7, 3, 1)


@dataclass
class SweepResult:
    """Counts per pass for one sweep run."""

    grace_warnings: int = 0
    suspended: int = 0
    expired: int = 0
    reminders: dict[int, int] = field(default_factory=dict)
    stale_payments_cancelled: int = 0
    errors: int = 0
    dry_run: bool = False

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["reminders"] = {str(k): v for k, v in self.reminders.items()}
        return data


def start_of_day(now: datetime) -> datetime:
    """Midnight of the given instant's calendar day in the active timezone."""
    return timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)


def _package_name(user: User) -> str:
    if user.membership_package is not None:
        return user.membership_package.name
    return user.membership_plan or "gym"


def _run_per_user(
    pass_name: str,
    user_ids: Iterable[int],
    handler: Callable[[int], bool],
    result: SweepResult,
) -> int:
    """Apply handler to each user; count successes, log and count failures."""
    processed = 0
    for user_id in user_ids:
        try:
            if handler(user_id):
                processed += 1
        except Exception:
            result.errors += 1
            logger.exception("membership_sweep_user_failed", sweep_pass=pass_name, **{"usr.id": user_id})
    logger.info("membership_sweep_pass_completed", sweep_pass=pass_name, processed=processed)
    return processed


# --- Pass 1: grace period ending tomorrow ---


def _grace_ending_candidates(today: datetime) -> list[int]:
    return list(
        User.objects.filter(
            membership_status=Status.GRACE_PERIOD,
            grace_period_end_date__gte=today,
            grace_period_end_date__lt=today + timedelta(days=1),
        ).values_list("pk", flat=True)
    )


def _warn_grace_ending(user_id: int) -> bool:
    user = User.objects.select_related("membership_package").get(pk=user_id)
    package_name = _package_name(user)

    if user.notify_email:
        dispatch_email(
            EmailTemplate.GRACE_PERIOD_ENDING,
            user.email,
            {
                "name": user.name,
                "package_name": package_name,
                "grace_period_end_date": user.grace_period_end_date,
            },
        )
    if user.notify_in_app:
        notify(
            user,
            Notification.Type.MEMBERSHIP_EXPIRY,
            "Final Reminder: Grace Period Ending",
            "Your grace period ends tomorrow. Renew now to avoid account suspension.",
            priority=Notification.Priority.HIGH,
            metadata={
                "package_name": package_name,
                "grace_period_end_date": user.grace_period_end_date,
                "action_url": "/dashboard/renew",
            },
        )
    return True


# --- Pass 2: grace period ended ---


def _suspension_candidates(today: datetime) -> list[int]:
    return list(
        User.objects.filter(
            membership_status=Status.GRACE_PERIOD,
            grace_period_end_date__lt=today,
        ).values_list("pk", flat=True)
    )


def _make_suspender(today: datetime) -> Callable[[int], bool]:
    def _suspend(user_id: int) -> bool:
        with transaction.atomic():
            user = (
                User.objects.select_for_update()
                .select_related("membership_package")
                .get(pk=user_id)
            )
            # Re-check under lock: a payment may have reactivated the member
            if (
                user.membership_status != Status.GRACE_PERIOD
                or user.grace_period_end_date is None
                or user.grace_period_end_date >= today
            ):
                return False

            expire_membership(user)
            if user.membership_package_id:
                release_member(user.membership_package_id)

            if user.notify_in_app:
                notify(
                    user,
                    Notification.Type.MEMBERSHIP_EXPIRY,
                    "Account Suspended",
                    "Your grace period has ended and your account has been suspended. "
                    "Renew your membership to regain access.",
                    priority=Notification.Priority.HIGH,
                    metadata={"action_url": "/dashboard/renew"},
                )
            if user.notify_email:
                dispatch_email(
                    EmailTemplate.MEMBERSHIP_SUSPENDED,
                    user.email,
                    {"name": user.name, "package_name": _package_name(user)},
                )
        return True

    return _suspend


# --- Pass 3: end date passed ---


def _expiry_candidates(today: datetime) -> list[int]:
    return list(
        User.objects.filter(
            membership_status=Status.ACTIVE,
            membership_end_date__lt=today,
        ).values_list("pk", flat=True)
    )


def _make_expirer(today: datetime) -> Callable[[int], bool]:
    def _expire(user_id: int) -> bool:
        with transaction.atomic():
            user = (
                User.objects.select_for_update()
                .select_related("membership_package")
                .get(pk=user_id)
            )
            if (
                user.membership_status != Status.ACTIVE
                or user.membership_end_date is None
                or user.membership_end_date >= today
            ):
                return False

            enter_grace_period(user)
            package_name = _package_name(user)

            if user.notify_email:
                dispatch_email(
                    EmailTemplate.MEMBERSHIP_EXPIRED,
                    user.email,
                    {
                        "name": user.name,
                        "package_name": package_name,
                        "end_date": user.membership_end_date,
                        "grace_period_end_date": user.grace_period_end_date,
                    },
                )
            if user.notify_in_app:
                notify(
                    user,
                    Notification.Type.MEMBERSHIP_EXPIRY,
                    "Membership Expired",
                    f"Your {package_name} membership has expired. "
                    f"You have a {GRACE_PERIOD_DAYS}-day grace period to renew.",
                    priority=Notification.Priority.HIGH,
                    metadata={
                        "package_name": package_name,
                        "membership_end_date": user.membership_end_date,
                        "grace_period_end_date": user.grace_period_end_date,
                        "action_url": "/dashboard/renew",
                    },
                )
        return True

    return _expire


# --- Pass 4: reminders ---


def _reminder_candidates(today: datetime, days: int) -> list[int]:
    target = today + timedelta(days=days)
    candidates = User.objects.filter(
        membership_status=Status.ACTIVE,
        membership_end_date__gte=target,
        membership_end_date__lt=target + timedelta(days=1),
    ).only("pk", "reminder_days")
    return [user.pk for user in candidates if user.wants_reminder(days)]


def _make_reminder(days: int) -> Callable[[int], bool]:
    unit = "day" if days == 1 else "days"

    def _remind(user_id: int) -> bool:
        user = User.objects.select_related("membership_package").get(pk=user_id)
        package_name = _package_name(user)

        if user.notify_email:
            dispatch_email(
                EmailTemplate.EXPIRY_REMINDER,
                user.email,
                {
                    "name": user.name,
                    "package_name": package_name,
                    "end_date": user.membership_end_date,
                    "days_until_expiry": days,
                },
            )
        if user.notify_in_app:
            notify(
                user,
                Notification.Type.MEMBERSHIP_EXPIRY,
                "Membership Expiring Soon",
                f"Your {package_name} membership expires in {days} {unit}. "
                "Renew now to continue without interruption.",
                priority=Notification.Priority.HIGH if days <= 3 else Notification.Priority.MEDIUM,
                metadata={
                    "package_name": package_name,
                    "membership_end_date": user.membership_end_date,
                    "days_until_expiry": days,
                    "action_url": "/dashboard/renew",
                },
            )
        return True

    return _remind


def run_sweep(
    now: datetime | None = None,
    reminder_days: Iterable[int] | None = None,
    dry_run: bool = False,
) -> SweepResult:
    """
    Run one daily sweep.

    Args:
        now: Reference instant (defaults to current time). Day boundaries are
            computed in the active timezone.
        reminder_days: Lead times for reminder passes (defaults to
            MEMBERSHIP_REMINDER_DAYS setting, then 7/3/1).
        dry_run: Count candidates per pass without writing anything.

    Returns:
        SweepResult with counts per pass.
    """
    now = now or timezone.now()
    today = start_of_day(now)
    if reminder_days is None:
        reminder_days = getattr(settings, "MEMBERSHIP_REMINDER_DAYS", DEFAULT_REMINDER_DAYS)
    lead_times = sorted({int(d) for d in reminder_days if int(d) > 0}, reverse=True)

    result = SweepResult(dry_run=dry_run)
    logger.info(
        "membership_sweep_started",
        today=today.date().isoformat(),
        reminder_days=lead_times,
        dry_run=dry_run,
    )

    if dry_run:
        result.grace_warnings = len(_grace_ending_candidates(today))
        result.suspended = len(_suspension_candidates(today))
        result.expired = len(_expiry_candidates(today))
        for days in lead_times:
            result.reminders[days] = len(_reminder_candidates(today, days))
        logger.info("membership_sweep_completed", **result.as_dict())
        return result

    result.grace_warnings = _run_per_user(
        "grace_warning", _grace_ending_candidates(today), _warn_grace_ending, result
    )
    result.suspended = _run_per_user(
        "suspension", _suspension_candidates(today), _make_suspender(today), result
    )
    result.expired = _run_per_user(
        "expiry", _expiry_candidates(today), _make_expirer(today), result
    )
    for days in lead_times:
        result.reminders[days] = _run_per_user(
            f"reminder_{days}d", _reminder_candidates(today, days), _make_reminder(days), result
        )

    expiry_minutes = getattr(settings, "PENDING_PAYMENT_EXPIRY_MINUTES", None)
    if expiry_minutes:
        from apps.payments.services import cancel_stale_pending_payments

        try:
            result.stale_payments_cancelled = cancel_stale_pending_payments(
                older_than_minutes=expiry_minutes, now=now
            )
        except Exception:
            result.errors += 1
            logger.exception("membership_sweep_stale_payments_failed")

    logger.info("membership_sweep_completed", **result.as_dict())
    return result
