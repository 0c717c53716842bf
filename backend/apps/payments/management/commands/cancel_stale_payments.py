"""
Cancel pending payments the gateway never confirmed.

Defaults to PENDING_PAYMENT_EXPIRY_MINUTES; does nothing when that is unset
and --older-than-minutes is not given.
Example: ./manage.py cancel_stale_payments --older-than-minutes 1440
"""

from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.core.logging import get_logger
from apps.payments.models import Payment
from apps.payments.services import cancel_stale_pending_payments

logger = get_logger(__name__)


class Command(BaseCommand):
    help = "Cancel pending payments older than the configured expiry"

    def add_arguments(self, parser):
        parser.add_argument(
            "--older-than-minutes",
            type=int,
            default=None,
            help="Cancel pending payments older than N minutes (default: PENDING_PAYMENT_EXPIRY_MINUTES)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show how many payments would be cancelled",
        )

    def handle(self, *args, **options):
        minutes = options["older_than_minutes"] or settings.PENDING_PAYMENT_EXPIRY_MINUTES
        if not minutes:
            self.stdout.write(
                self.style.WARNING("Pending payment expiry is not configured; nothing to do")
            )
            return

        if options["dry_run"]:
            cutoff = timezone.now() - timedelta(minutes=minutes)
            count = Payment.objects.filter(
                status=Payment.Status.PENDING, created_at__lt=cutoff
            ).count()
            self.stdout.write(f"[DRY RUN] Would cancel {count} pending payments")
            return

        cancelled = cancel_stale_pending_payments(older_than_minutes=minutes)
        logger.info("cancel_stale_payments_completed", cancelled=cancelled, older_than_minutes=minutes)
        self.stdout.write(self.style.SUCCESS(f"Cancelled {cancelled} pending payments"))
