"""
Notification services.

create_notification() is the plain store operation. notify() is what the
payment and membership code calls: it writes inside a savepoint and logs
instead of raising, so a broken notification never rolls back the
transition that triggered it.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction
from django.utils import timezone

from apps.core.logging import get_logger
from apps.notifications.models import Notification

if TYPE_CHECKING:
    from apps.accounts.models import User

logger = get_logger(__name__)


def _json_safe(metadata: dict[str, Any] | None) -> dict[str, Any]:
    """Coerce datetimes/decimals in metadata to JSON-friendly values."""
    if not metadata:
        return {}
    encoder = DjangoJSONEncoder()
    safe: dict[str, Any] = {}
    for key, value in metadata.items():
        if value is None or isinstance(value, (str, int, float, bool, list, dict)):
            safe[key] = value
        else:
            safe[key] = encoder.default(value)
    return safe


def create_notification(
    user: "User",
    type: str,
    title: str,
    message: str,
    priority: str = Notification.Priority.MEDIUM,
    metadata: dict[str, Any] | None = None,
) -> Notification:
    """Persist a notification for a user."""
    return Notification.objects.create(
        user=user,
        type=type,
        title=title[:200],
        message=message[:1000],
        priority=priority,
        metadata=_json_safe(metadata),
    )


def notify(
    user: "User",
    type: str,
    title: str,
    message: str,
    priority: str = Notification.Priority.MEDIUM,
    metadata: dict[str, Any] | None = None,
) -> Notification | None:
    """
    Best-effort notification.

    Returns None (and logs) if the notification could not be written.
    """
    try:
        with transaction.atomic():
            return create_notification(user, type, title, message, priority, metadata)
    except Exception:
        logger.exception(
            "notification_create_failed",
            notification_type=type,
            **{"usr.id": user.pk},
        )
        return None


def unread_count(user: "User") -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


def mark_all_read(user: "User") -> int:
    """Mark every unread notification for the user as read. Returns rows updated."""
    return Notification.objects.filter(user=user, is_read=False).update(
        is_read=True, updated_at=timezone.now()
    )


def delete_old_read_notifications(days: int = 30) -> int:
    """Delete read notifications older than N days, plus any past their expiry."""
    now = timezone.now()
    cutoff = now - timedelta(days=days)
    deleted_read, _ = Notification.objects.filter(is_read=True, created_at__lt=cutoff).delete()
    deleted_expired, _ = Notification.objects.filter(expires_at__lte=now).delete()
    return deleted_read + deleted_expired
