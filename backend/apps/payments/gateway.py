"""
PayHere gateway client.

PayHere has no server-side SDK: checkout is a browser form POST signed with
an MD5 hash, and results arrive as form-encoded notifications signed the
same way. This module owns both signatures and the form payload.

    hash = UPPER(MD5(merchant_id + order_id + amount + currency
                     [+ status_code] + UPPER(MD5(merchant_secret))))
"""

import hashlib
import hmac
from decimal import ROUND_HALF_UP, Decimal
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from django.conf import settings
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from apps.accounts.models import User
    from apps.packages.models import Package
    from apps.payments.models import Payment

CENT = Decimal("0.01")


class GatewayStatus(IntEnum):
    SUCCESS = 2
    PENDING = 0
    CANCELLED = -1
    FAILED = -2
    CHARGEDBACK = -3


def parse_status_code(code: int | str) -> GatewayStatus | None:
    """Map a raw gateway status code to GatewayStatus, or None if unknown."""
    try:
        return GatewayStatus(int(code))
    except ValueError:
        return None


def format_amount(amount: Decimal | int | float | str) -> str:
    """Two decimals, half-up. 8010 -> '8010.00'."""
    return str(Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP))


def _md5_upper(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


def hash_secret(secret: str) -> str:
    return _md5_upper(secret)


def checkout_hash(
    merchant_id: str,
    order_id: str,
    amount: Decimal | str,
    currency: str,
    secret: str,
) -> str:
    """Signature for the checkout form."""
    return _md5_upper(
        f"{merchant_id}{order_id}{format_amount(amount)}{currency}{hash_secret(secret)}"
    )


def notification_hash(
    merchant_id: str,
    order_id: str,
    amount: Decimal | str,
    currency: str,
    status_code: int | str,
    secret: str,
) -> str:
    """Expected md5sig of a payment notification."""
    return _md5_upper(
        f"{merchant_id}{order_id}{format_amount(amount)}{currency}{status_code}{hash_secret(secret)}"
    )


class NotificationPayload(BaseModel):
    """Form fields posted by the gateway to the notify URL."""

    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)

    merchant_id: str
    order_id: str = Field(min_length=1)
    payhere_amount: Decimal
    payhere_currency: str
    status_code: int
    md5sig: str
    payment_id: str = ""
    status_message: str = ""
    card_holder_name: str = ""
    card_no: str = ""
    method: str = ""
    custom_1: str = ""
    custom_2: str = ""

    def raw(self) -> dict[str, Any]:
        """Payload as stored on the payment, without the signature."""
        return self.model_dump(mode="json", exclude={"md5sig"})


def verify_notification(payload: NotificationPayload, secret: str | None = None) -> bool:
    """Constant-time, case-insensitive comparison of md5sig with the expected hash."""
    if secret is None:
        secret = settings.PAYHERE_MERCHANT_SECRET
    if not secret or not payload.md5sig:
        return False
    expected = notification_hash(
        payload.merchant_id,
        payload.order_id,
        payload.payhere_amount,
        payload.payhere_currency,
        payload.status_code,
        secret,
    )
    return hmac.compare_digest(expected, payload.md5sig.upper())


def build_checkout_form(payment: "Payment", user: "User", package: "Package") -> dict[str, Any]:
    """Fields the frontend posts to the gateway checkout page."""
    name_parts = (user.name or "").split()
    return {
        "sandbox": settings.PAYHERE_SANDBOX,
        "merchant_id": payment.merchant_id,
        "return_url": f"{settings.FRONTEND_URL}/payment/success",
        "cancel_url": f"{settings.FRONTEND_URL}/payment/cancel",
        "notify_url": f"{settings.BACKEND_URL}/webhooks/payhere/",
        "order_id": payment.order_id,
        "items": package.name,
        "currency": payment.currency,
        "amount": format_amount(payment.amount),
        "first_name": name_parts[0] if name_parts else "",
        "last_name": " ".join(name_parts[1:]),
        "email": user.email,
        "phone": user.phone or "",
        "address": "",
        "city": "",
        "country": settings.PAYMENT_COUNTRY,
        "hash": checkout_hash(
            payment.merchant_id,
            payment.order_id,
            payment.amount,
            payment.currency,
            settings.PAYHERE_MERCHANT_SECRET,
        ),
        "custom_1": str(user.pk),
        "custom_2": str(package.pk),
    }
