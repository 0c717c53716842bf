"""
Daily membership lifecycle sweep.

Schedule once a day shortly after midnight (cron, ECS scheduled task).
Example: ./manage.py run_membership_sweep --reminder-days 7,3,1
"""

from django.core.management.base import BaseCommand, CommandError

from apps.core.logging import get_logger
from apps.memberships.sweeper import run_sweep

logger = get_logger(__name__)


def _parse_days(value: str) -> list[int]:
    try:
        days = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise CommandError(f"Invalid --reminder-days value: {value!r}") from None
    if any(d <= 0 for d in days):
        raise CommandError("--reminder-days values must be positive")
    return days


class Command(BaseCommand):
    help = "Move memberships through grace period and expiry, and send reminders"

    def add_arguments(self, parser):
        parser.add_argument(
            "--reminder-days",
            type=str,
            default=None,
            help="Comma-separated reminder lead times in days (default: MEMBERSHIP_REMINDER_DAYS)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Count affected members per pass without changing anything",
        )

    def handle(self, *args, **options):
        reminder_days = None
        if options["reminder_days"]:
            reminder_days = _parse_days(options["reminder_days"])

        result = run_sweep(reminder_days=reminder_days, dry_run=options["dry_run"])

        prefix = "[DRY RUN] " if result.dry_run else ""
        reminders = ", ".join(f"{d}d={n}" for d, n in sorted(result.reminders.items(), reverse=True))
        self.stdout.write(
            f"{prefix}grace warnings={result.grace_warnings} suspended={result.suspended} "
            f"expired={result.expired} reminders=[{reminders}] "
            f"stale payments cancelled={result.stale_payments_cancelled}"
        )
        if result.errors:
            self.stdout.write(self.style.WARNING(f"{result.errors} member(s) failed, see logs"))
        else:
            self.stdout.write(self.style.SUCCESS("Sweep completed"))
