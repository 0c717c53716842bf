"""
Transactional email - templates, pluggable delivery backends and the
fire-and-forget dispatcher.

LocalEmailBackend: logs messages (dev/test)
ResendEmailBackend: delivers through the Resend HTTP API (production)

Callers use dispatch_email(). It defers delivery until the surrounding
transaction commits and never raises, so a slow or failing provider can
neither delay nor undo a payment or membership transition.
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

import httpx
from django.conf import settings
from django.db import transaction

from apps.core.logging import get_logger

logger = get_logger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DELIVERY_TIMEOUT = 10

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="email-dispatch")


class EmailSendError(Exception):
    """Raised by a backend when the provider rejects or fails a send."""

    pass


class EmailTemplate(StrEnum):
    MEMBERSHIP_ACTIVATED = "membership_activated"
    PAYMENT_RECEIPT = "payment_receipt"
    EXPIRY_REMINDER = "expiry_reminder"
    MEMBERSHIP_EXPIRED = "membership_expired"
    GRACE_PERIOD_ENDING = "grace_period_ending"
    MEMBERSHIP_SUSPENDED = "membership_suspended"


@dataclass
class EmailMessage:
    to: str
    subject: str
    text: str
    template: str = ""


def _fmt_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%d %b %Y")
    if isinstance(value, date):
        return value.strftime("%d %b %Y")
    return str(value) if value is not None else ""


def render_email(template: EmailTemplate, data: dict[str, Any]) -> tuple[str, str]:
    """Build (subject, plain-text body) for a template."""
    name = data.get("name") or "there"
    package = data.get("package_name") or "gym"
    currency = data.get("currency", "LKR")

    match template:
        case EmailTemplate.MEMBERSHIP_ACTIVATED:
            subject = f"Your {package} membership is active"
            body = (
                f"Hi {name},\n\n"
                f"Welcome aboard! Your {package} membership is now active.\n"
                f"Start date: {_fmt_date(data.get('start_date'))}\n"
                f"End date: {_fmt_date(data.get('end_date'))}\n"
            )
        case EmailTemplate.PAYMENT_RECEIPT:
            subject = f"Payment receipt {data.get('order_id', '')}"
            body = (
                f"Hi {name},\n\n"
                f"We received your payment of {currency} {data.get('amount')} "
                f"for {package}.\n"
                f"Order: {data.get('order_id')}\n"
                f"Gateway reference: {data.get('gateway_payment_id') or '-'}\n"
                f"Paid on: {_fmt_date(data.get('paid_at'))}\n"
            )
        case EmailTemplate.EXPIRY_REMINDER:
            days = data.get("days_until_expiry")
            unit = "day" if days == 1 else "days"
            subject = f"Your membership expires in {days} {unit}"
            body = (
                f"Hi {name},\n\n"
                f"Your {package} membership expires on {_fmt_date(data.get('end_date'))} "
                f"({days} {unit} from now). Renew to continue without interruption.\n"
            )
        case EmailTemplate.MEMBERSHIP_EXPIRED:
            subject = "Your membership has expired"
            body = (
                f"Hi {name},\n\n"
                f"Your {package} membership ended on {_fmt_date(data.get('end_date'))}. "
                f"You have a grace period until {_fmt_date(data.get('grace_period_end_date'))} "
                f"to renew.\n"
            )
        case EmailTemplate.GRACE_PERIOD_ENDING:
            subject = "Final reminder: your grace period ends tomorrow"
            body = (
                f"Hi {name},\n\n"
                f"Your grace period ends on {_fmt_date(data.get('grace_period_end_date'))}. "
                f"Renew now to avoid account suspension.\n"
            )
        case EmailTemplate.MEMBERSHIP_SUSPENDED:
            subject = "Your membership has been suspended"
            body = (
                f"Hi {name},\n\n"
                f"Your grace period has ended and your {package} membership is suspended. "
                f"Renew your membership to regain access.\n"
            )
        case _:
            raise ValueError(f"Unknown email template: {template}")

    return subject, body


class EmailBackend(ABC):
    """Abstract base class for email delivery backends."""

    @abstractmethod
    def send(self, message: EmailMessage) -> str | None:
        """Deliver a message. Returns a provider message id when available."""
        pass


class LocalEmailBackend(EmailBackend):
    """Logs emails instead of sending them."""

    def send(self, message: EmailMessage) -> str | None:
        logger.info(
            "email_sent",
            to=message.to,
            subject=message.subject,
            template=message.template,
            backend="local",
        )
        return None


class ResendEmailBackend(EmailBackend):
    """Delivers emails through the Resend HTTP API."""

    def __init__(self, api_key: str, sender: str, timeout: float = DELIVERY_TIMEOUT):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def send(self, message: EmailMessage) -> str | None:
        try:
            response = httpx.post(
                RESEND_API_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.sender,
                    "to": [message.to],
                    "subject": message.subject,
                    "text": message.text,
                    "tags": [{"name": "template", "value": message.template or "none"}],
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise EmailSendError(f"Email provider unreachable: {e}") from e

        if response.status_code >= 300:
            raise EmailSendError(
                f"Email provider returned {response.status_code}: {response.text[:200]}"
            )
        return response.json().get("id")


def get_email_backend() -> EmailBackend:
    """
    Get the configured email backend.

    Uses EMAIL_DELIVERY_BACKEND setting: 'local' or 'resend'
    """
    backend_type = getattr(settings, "EMAIL_DELIVERY_BACKEND", "local")

    if backend_type == "resend":
        api_key = getattr(settings, "RESEND_API_KEY", "")
        if not api_key:
            raise ValueError("RESEND_API_KEY setting required for resend backend")
        return ResendEmailBackend(api_key=api_key, sender=settings.EMAIL_FROM)

    return LocalEmailBackend()


def send_email(template: EmailTemplate, recipient: str, data: dict[str, Any]) -> str | None:
    """Render and send an email synchronously. Raises EmailSendError on failure."""
    subject, text = render_email(template, data)
    message = EmailMessage(to=recipient, subject=subject, text=text, template=str(template))
    return get_email_backend().send(message)


def _deliver(template: EmailTemplate, recipient: str, data: dict[str, Any]) -> None:
    try:
        send_email(template, recipient, data)
    except Exception:
        logger.exception("email_dispatch_failed", template=str(template), to=recipient)


def dispatch_email(template: EmailTemplate, recipient: str, data: dict[str, Any]) -> None:
    """
    Fire-and-forget email.

    Delivery starts after the current transaction commits (immediately when
    there is none) and runs on a worker thread unless EMAIL_DISPATCH_MODE is
    'inline'. Failures are logged, never raised.
    """
    if not recipient:
        logger.warning("email_dispatch_no_recipient", template=str(template))
        return

    def _start() -> None:
        if getattr(settings, "EMAIL_DISPATCH_MODE", "thread") == "inline":
            _deliver(template, recipient, data)
            return
        try:
            _executor.submit(_deliver, template, recipient, data)
        except RuntimeError:
            # Executor is shut down during interpreter exit
            logger.warning("email_dispatch_executor_unavailable", template=str(template))

    transaction.on_commit(_start)
