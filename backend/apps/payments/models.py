"""
Payment models - the append-only ledger of gateway checkouts.
"""

from datetime import datetime
from decimal import Decimal

from django.db import models
from django.utils import timezone

from apps.core.models import TimestampedModel
from apps.payments.exceptions import InvalidPaymentTransition


class Payment(TimestampedModel):
    """
    One checkout attempt through the payment gateway.

    Created as pending by initiation and moved to a terminal status only by
    the reconciler. Status is one-way: pending -> success/failed/cancelled,
    and success -> refunded on chargeback. Rows are never deleted.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SUCCESS = "success", "Success"
        FAILED = "failed", "Failed"
        CANCELLED = "cancelled", "Cancelled"
        REFUNDED = "refunded", "Refunded"

    class Currency(models.TextChoices):
        LKR = "LKR", "Sri Lankan Rupee"
        USD = "USD", "US Dollar"

    user = models.ForeignKey(
        "accounts.User",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    package = models.ForeignKey(
        "packages.Package",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    order_id = models.CharField(
        max_length=100,
        unique=True,
        help_text="Merchant order reference, e.g. 'ORDER_1700000000000_42'",
    )
    merchant_id = models.CharField(max_length=50)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(
        max_length=3,
        choices=Currency.choices,
        default=Currency.LKR,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    payment_method = models.CharField(max_length=50, default="PayHere")

    # Gateway correlation
    gateway_payment_id = models.CharField(max_length=100, blank=True, db_index=True)
    gateway_status_code = models.IntegerField(null=True, blank=True)
    status_message = models.CharField(max_length=500, blank=True)
    card_holder_name = models.CharField(max_length=100, blank=True)
    card_no = models.CharField(max_length=30, blank=True, help_text="Masked, as sent by the gateway")

    membership_start_date = models.DateTimeField(null=True, blank=True)
    membership_end_date = models.DateTimeField(null=True, blank=True)

    refund_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    refund_reason = models.CharField(max_length=500, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="payment_user_created_idx"),
            models.Index(fields=["status", "-created_at"], name="payment_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    def _require(self, allowed: tuple[str, ...], target: str) -> None:
        if self.status not in allowed:
            raise InvalidPaymentTransition(self.status, target)

    def _record_gateway(self, fields: dict, raw: dict | None) -> list[str]:
        changed = []
        for name, value in fields.items():
            if value is not None:
                setattr(self, name, value)
                changed.append(name)
        if raw is not None:
            self.metadata = {**(self.metadata or {}), "raw_response": raw}
            changed.append("metadata")
        return changed

    def mark_success(
        self,
        *,
        gateway_payment_id: str = "",
        status_code: int | None = None,
        status_message: str = "",
        card_holder_name: str = "",
        card_no: str = "",
        method: str = "",
        membership_start_date: datetime | None = None,
        membership_end_date: datetime | None = None,
        raw: dict | None = None,
    ) -> None:
        """
        pending, cancelled or failed -> success.

        A capture confirmed after the payment was cancelled (stale cleanup,
        closed checkout tab) or reported failed still counts.
        """
        self._require(
            (self.Status.PENDING, self.Status.CANCELLED, self.Status.FAILED), self.Status.SUCCESS
        )
        self.status = self.Status.SUCCESS
        changed = self._record_gateway(
            {
                "gateway_payment_id": gateway_payment_id,
                "gateway_status_code": status_code,
                "status_message": status_message[:500],
                "card_holder_name": card_holder_name[:100],
                "card_no": card_no[:30],
                "payment_method": method or None,
                "membership_start_date": membership_start_date,
                "membership_end_date": membership_end_date,
            },
            raw,
        )
        self.save(update_fields=["status", *changed, "updated_at"])

    def mark_failed(
        self,
        *,
        status_code: int | None = None,
        status_message: str = "",
        gateway_payment_id: str = "",
        raw: dict | None = None,
    ) -> None:
        """pending -> failed."""
        self._require((self.Status.PENDING,), self.Status.FAILED)
        self.status = self.Status.FAILED
        changed = self._record_gateway(
            {
                "gateway_status_code": status_code,
                "status_message": (status_message or "Payment failed")[:500],
                "gateway_payment_id": gateway_payment_id,
            },
            raw,
        )
        self.save(update_fields=["status", *changed, "updated_at"])

    def mark_cancelled(
        self,
        *,
        status_code: int | None = None,
        status_message: str = "",
        raw: dict | None = None,
    ) -> None:
        """pending -> cancelled."""
        self._require((self.Status.PENDING,), self.Status.CANCELLED)
        self.status = self.Status.CANCELLED
        changed = self._record_gateway(
            {
                "gateway_status_code": status_code,
                "status_message": (status_message or "Payment cancelled by user")[:500],
            },
            raw,
        )
        self.save(update_fields=["status", *changed, "updated_at"])

    def mark_refunded(
        self,
        *,
        reason: str,
        amount: Decimal | None = None,
        status_code: int | None = None,
        refunded_at: datetime | None = None,
        raw: dict | None = None,
    ) -> None:
        """success -> refunded (chargeback)."""
        self._require((self.Status.SUCCESS,), self.Status.REFUNDED)
        self.status = self.Status.REFUNDED
        changed = self._record_gateway(
            {
                "gateway_status_code": status_code,
                "refund_amount": amount if amount is not None else self.amount,
                "refund_reason": reason[:500],
                "refunded_at": refunded_at or timezone.now(),
            },
            raw,
        )
        self.save(update_fields=["status", *changed, "updated_at"])

    def update_pending_message(
        self,
        *,
        status_code: int | None = None,
        status_message: str = "",
        raw: dict | None = None,
    ) -> None:
        """Record a gateway 'still processing' notice. Status stays pending."""
        self._require((self.Status.PENDING,), self.Status.PENDING)
        changed = self._record_gateway(
            {
                "gateway_status_code": status_code,
                "status_message": (status_message or "Payment is being processed")[:500],
            },
            raw,
        )
        self.save(update_fields=[*changed, "updated_at"])
