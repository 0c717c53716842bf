"""
Factories and helpers for payments tests.
"""

from decimal import Decimal
from typing import Any

import factory
from django.conf import settings
from factory.django import DjangoModelFactory

from apps.payments.gateway import format_amount, notification_hash
from apps.payments.models import Payment


class PaymentFactory(DjangoModelFactory):
    """Pending payment for a fresh user and package."""

    class Meta:
        model = Payment

    user = factory.SubFactory("tests.accounts.factories.UserFactory")
    package = factory.SubFactory("tests.packages.factories.PackageFactory")
    order_id = factory.Sequence(lambda n: f"ORDER_17000000{n:05d}_1")
    merchant_id = factory.LazyFunction(lambda: settings.PAYHERE_MERCHANT_ID)
    amount = factory.LazyAttribute(lambda o: o.package.discounted_price)
    currency = Payment.Currency.LKR
    status = Payment.Status.PENDING
    metadata = factory.LazyFunction(dict)


def build_notification(
    payment: Payment,
    status_code: int,
    *,
    amount: Decimal | str | None = None,
    secret: str | None = None,
    **overrides: Any,
) -> dict[str, str]:
    """
    Form body the gateway would post for this payment, correctly signed.

    Pass md5sig=... in overrides to send a specific (e.g. wrong) signature.
    """
    amount = format_amount(amount if amount is not None else payment.amount)
    data = {
        "merchant_id": payment.merchant_id,
        "order_id": payment.order_id,
        "payhere_amount": amount,
        "payhere_currency": payment.currency,
        "status_code": str(status_code),
        "payment_id": "320025071234",
        "status_message": "Successfully completed the payment.",
        "card_holder_name": "Test Member",
        "card_no": "************1292",
        "method": "VISA",
        "custom_1": str(payment.user_id),
        "custom_2": str(payment.package_id),
    }
    data.update({k: v for k, v in overrides.items() if k != "md5sig"})
    data["md5sig"] = overrides.get("md5sig") or notification_hash(
        data["merchant_id"],
        data["order_id"],
        data["payhere_amount"],
        data["payhere_currency"],
        data["status_code"],
        secret if secret is not None else settings.PAYHERE_MERCHANT_SECRET,
    )
    return data
