"""
Notification models - in-app notification trail for members.
"""

from django.db import models
from django.utils import timezone

from apps.core.models import TimestampedModel


class Notification(TimestampedModel):
    """
    In-app notification.

    Written by payment reconciliation and the lifecycle sweep as an audit
    and communication trail. Advisory: failing to write one never blocks
    a payment or membership transition.
    """

    class Type(models.TextChoices):
        MEMBERSHIP_EXPIRY = "membership_expiry", "Membership Expiry"
        PAYMENT_SUCCESS = "payment_success", "Payment Success"
        PAYMENT_FAILED = "payment_failed", "Payment Failed"
        PAYMENT_REFUNDED = "payment_refunded", "Payment Refunded"
        MEMBERSHIP_ACTIVATED = "membership_activated", "Membership Activated"
        GENERAL = "general", "General"
        PROMOTION = "promotion", "Promotion"

    class Priority(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    title = models.CharField(max_length=200)
    message = models.CharField(max_length=1000)
    type = models.CharField(max_length=30, choices=Type.choices, db_index=True)
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
    )
    is_read = models.BooleanField(default=False, db_index=True)
    metadata = models.JSONField(default=dict, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "is_read", "-created_at"], name="notification_user_read_idx"),
            models.Index(fields=["user", "type", "-created_at"], name="notification_user_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} -> {self.user_id}: {self.title}"

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= timezone.now()

    def mark_read(self) -> None:
        self.is_read = True
        self.save(update_fields=["is_read", "updated_at"])
