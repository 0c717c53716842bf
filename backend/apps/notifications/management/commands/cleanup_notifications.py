"""
Management command to delete old read notifications.

Run periodically via cron to keep the notification table small.
Example: ./manage.py cleanup_notifications --days 30
"""

from django.core.management.base import BaseCommand

from apps.core.logging import get_logger
from apps.notifications.services import delete_old_read_notifications

logger = get_logger(__name__)


class Command(BaseCommand):
    help = "Delete read notifications older than the given number of days"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=30,
            help="Delete read notifications older than this many days (default: 30)",
        )

    def handle(self, *args, **options):
        deleted = delete_old_read_notifications(days=options["days"])
        logger.info("notifications_cleanup_completed", deleted=deleted, days=options["days"])
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} notifications"))
