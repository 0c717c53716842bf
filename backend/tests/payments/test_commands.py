"""
Tests for payment management commands and stale pending cancellation.
"""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from apps.payments.models import Payment
from apps.payments.services import STALE_PAYMENT_MESSAGE, cancel_stale_pending_payments
from tests.payments.factories import PaymentFactory


def _age(payment: Payment, minutes: int) -> None:
    Payment.objects.filter(pk=payment.pk).update(
        created_at=timezone.now() - timedelta(minutes=minutes)
    )


@pytest.mark.django_db
class TestCancelStalePendingPayments:
    def test_cancels_only_old_pending(self) -> None:
        old = PaymentFactory.create()
        fresh = PaymentFactory.create()
        old_success = PaymentFactory.create(status=Payment.Status.SUCCESS)
        _age(old, 120)
        _age(old_success, 120)

        cancelled = cancel_stale_pending_payments(older_than_minutes=60)

        old.refresh_from_db()
        fresh.refresh_from_db()
        old_success.refresh_from_db()
        assert cancelled == 1
        assert old.status == Payment.Status.CANCELLED
        assert old.status_message == STALE_PAYMENT_MESSAGE
        assert fresh.status == Payment.Status.PENDING
        assert old_success.status == Payment.Status.SUCCESS


@pytest.mark.django_db
class TestCancelStalePaymentsCommand:
    def test_disabled_without_configuration(self, settings) -> None:
        settings.PENDING_PAYMENT_EXPIRY_MINUTES = None
        payment = PaymentFactory.create()
        _age(payment, 10_000)
        out = StringIO()

        call_command("cancel_stale_payments", stdout=out)

        payment.refresh_from_db()
        assert payment.status == Payment.Status.PENDING
        assert "not configured" in out.getvalue()

    def test_uses_configured_expiry(self, settings) -> None:
        settings.PENDING_PAYMENT_EXPIRY_MINUTES = 60
        payment = PaymentFactory.create()
        _age(payment, 90)
        out = StringIO()

        call_command("cancel_stale_payments", stdout=out)

        payment.refresh_from_db()
        assert payment.status == Payment.Status.CANCELLED
        assert "Cancelled 1" in out.getvalue()

    def test_dry_run(self) -> None:
        payment = PaymentFactory.create()
        _age(payment, 90)
        out = StringIO()

        call_command("cancel_stale_payments", "--older-than-minutes", "60", "--dry-run", stdout=out)

        payment.refresh_from_db()
        assert payment.status == Payment.Status.PENDING
        assert "Would cancel 1" in out.getvalue()
