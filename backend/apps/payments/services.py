"""
Payment services - checkout initiation and gateway reconciliation.

initiate_payment() validates a checkout request and writes the pending
Payment. reconcile_notification() applies a verified gateway notification:
it is the only code that moves a Payment out of pending and, on success or
chargeback, changes membership state and package capacity in the same
transaction.

The gateway retries, reorders and duplicates notifications. The success
branch locks the Payment row and treats an already-successful payment as a
no-op, so a redelivery never takes a second capacity slot.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, QuerySet, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.core.logging import get_logger
from apps.memberships.services import (
    activate_membership,
    add_months,
    compute_membership_window,
    days_remaining,
    has_running_membership,
    revoke_membership,
)
from apps.notifications.email import EmailTemplate, dispatch_email
from apps.notifications.models import Notification
from apps.notifications.services import notify
from apps.packages.models import Package
from apps.packages.services import increment_members, release_member
from apps.payments.exceptions import (
    DuplicatePendingPaymentError,
    InvalidSignatureError,
    MembershipStillActiveError,
    PackageFullError,
    PackageNotFoundError,
    PackageUnavailableError,
    PaymentAccessDeniedError,
    UnknownOrderError,
    UserNotFoundError,
)
from apps.payments.gateway import (
    GatewayStatus,
    NotificationPayload,
    build_checkout_form,
    parse_status_code,
    verify_notification,
)
from apps.payments.models import Payment

logger = get_logger(__name__)

Status = Payment.Status

STALE_PAYMENT_MESSAGE = "Expired without gateway confirmation"


@dataclass
class PaymentInitiation:
    payment: Payment
    form: dict[str, Any]


@dataclass
class ReconcileOutcome:
    """What reconcile_notification() did with one notification."""

    order_id: str
    status_code: int
    action: str


@dataclass
class PaymentStats:
    total_payments: int
    successful_payments: int
    failed_payments: int
    pending_payments: int
    cancelled_payments: int
    refunded_payments: int
    total_revenue: Decimal
    monthly_revenue: Decimal
    success_rate: float


def make_order_id(user_id: int, now: datetime) -> str:
    """ORDER_<epoch-ms>_<userId>"""
    return f"ORDER_{int(now.timestamp() * 1000)}_{user_id}"


# --- Initiation ---


def initiate_payment(
    user_id: int,
    package_id: int,
    ip_address: str | None = None,
    user_agent: str = "",
    now: datetime | None = None,
) -> PaymentInitiation:
    """
    Validate a checkout request and create the pending Payment.

    The user row is locked for the duration so two concurrent initiations by
    the same user cannot both pass the duplicate-pending check.

    Raises:
        PackageNotFoundError, PackageUnavailableError, PackageFullError,
        UserNotFoundError, MembershipStillActiveError,
        DuplicatePendingPaymentError: No Payment row is written.
    """
    now = now or timezone.now()

    with transaction.atomic():
        user = User.objects.select_for_update().filter(pk=user_id).first()

        package = Package.objects.filter(pk=package_id).first()
        if package is None:
            raise PackageNotFoundError(package_id)
        if not package.is_active:
            raise PackageUnavailableError(package_id)
        if package.is_full:
            raise PackageFullError(package_id)

        if user is None:
            raise UserNotFoundError(user_id)

        if has_running_membership(user, now):
            raise MembershipStillActiveError(days_remaining(user, now))

        window_start = now - timedelta(minutes=settings.PENDING_PAYMENT_WINDOW_MINUTES)
        existing = (
            Payment.objects.filter(user=user, status=Status.PENDING, created_at__gte=window_start)
            .order_by("-created_at")
            .first()
        )
        if existing is not None:
            raise DuplicatePendingPaymentError(existing.order_id)

        payment = Payment.objects.create(
            user=user,
            package=package,
            order_id=make_order_id(user.pk, now),
            merchant_id=settings.PAYHERE_MERCHANT_ID,
            amount=package.discounted_price,
            currency=settings.PAYMENT_CURRENCY,
            status=Status.PENDING,
            metadata={"ip_address": ip_address, "user_agent": user_agent[:500]},
        )

    logger.info(
        "payment_initiated",
        order_id=payment.order_id,
        package_id=package.pk,
        amount=str(payment.amount),
        currency=payment.currency,
        **{"usr.id": user.pk},
    )
    return PaymentInitiation(payment=payment, form=build_checkout_form(payment, user, package))


# --- Reconciliation ---


def _check_custom_fields(payment: Payment, payload: NotificationPayload) -> None:
    """custom_1/custom_2 are echoed by the gateway; the payment's own FKs win."""
    if payload.custom_1 and payload.custom_1 != str(payment.user_id):
        logger.warning(
            "payment_custom_field_mismatch",
            order_id=payment.order_id,
            field="custom_1",
            received=payload.custom_1,
            expected=str(payment.user_id),
        )
    if payload.custom_2 and payload.custom_2 != str(payment.package_id):
        logger.warning(
            "payment_custom_field_mismatch",
            order_id=payment.order_id,
            field="custom_2",
            received=payload.custom_2,
            expected=str(payment.package_id),
        )


def _skip(payment: Payment, payload: NotificationPayload, action: str) -> str:
    logger.warning(
        "payment_notification_ignored",
        order_id=payment.order_id,
        payment_status=payment.status,
        status_code=payload.status_code,
    )
    return action


def _handle_success(payment_pk: int, payload: NotificationPayload, now: datetime) -> str:
    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment_pk)
        if payment.status == Status.SUCCESS:
            logger.info("payment_notification_duplicate", order_id=payment.order_id)
            return "duplicate"
        if payment.status == Status.REFUNDED:
            return _skip(payment, payload, "ignored")
        if payment.status != Status.PENDING:
            logger.warning(
                "payment_late_success",
                order_id=payment.order_id,
                previous_status=payment.status,
            )

        _check_custom_fields(payment, payload)
        package = Package.objects.get(pk=payment.package_id)
        user = User.objects.select_for_update().get(pk=payment.user_id)
        window = compute_membership_window(now, package.duration_months)

        payment.mark_success(
            gateway_payment_id=payload.payment_id,
            status_code=payload.status_code,
            status_message=payload.status_message,
            card_holder_name=payload.card_holder_name,
            card_no=payload.card_no,
            method=payload.method,
            membership_start_date=window.start,
            membership_end_date=window.end,
            raw=payload.raw(),
        )
        activate_membership(user, package, window, paid_at=now)
        increment_members(package.pk)

        notify(
            user,
            Notification.Type.PAYMENT_SUCCESS,
            "Payment Successful!",
            f"Your payment of {payment.currency} {payment.amount} was successful. "
            f"Your {package.name} membership is now active until "
            f"{timezone.localtime(window.end):%d %b %Y}.",
            priority=Notification.Priority.HIGH,
            metadata={
                "amount": payment.amount,
                "order_id": payment.order_id,
                "package_name": package.name,
                "membership_end_date": window.end,
                "action_url": "/dashboard",
            },
        )
        if user.notify_email:
            dispatch_email(
                EmailTemplate.MEMBERSHIP_ACTIVATED,
                user.email,
                {
                    "name": user.name,
                    "package_name": package.name,
                    "start_date": window.start,
                    "end_date": window.end,
                },
            )
            dispatch_email(
                EmailTemplate.PAYMENT_RECEIPT,
                user.email,
                {
                    "name": user.name,
                    "package_name": package.name,
                    "amount": payment.amount,
                    "currency": payment.currency,
                    "order_id": payment.order_id,
                    "gateway_payment_id": payment.gateway_payment_id,
                    "paid_at": now,
                },
            )

    logger.info(
        "membership_activated_by_payment",
        order_id=payment.order_id,
        package_id=package.pk,
        membership_end_date=window.end.isoformat(),
        **{"usr.id": user.pk},
    )
    return "activated"


def _handle_pending(payment_pk: int, payload: NotificationPayload) -> str:
    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment_pk)
        if payment.status != Status.PENDING:
            return _skip(payment, payload, "ignored")
        payment.update_pending_message(
            status_code=payload.status_code,
            status_message=payload.status_message or "Payment pending",
            raw=payload.raw(),
        )
    return "pending_updated"


def _handle_cancelled(payment_pk: int, payload: NotificationPayload) -> str:
    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment_pk)
        if payment.status == Status.CANCELLED:
            return "duplicate"
        if payment.status != Status.PENDING:
            return _skip(payment, payload, "ignored")
        payment.mark_cancelled(
            status_code=payload.status_code,
            status_message=payload.status_message,
            raw=payload.raw(),
        )
    logger.info("payment_cancelled", order_id=payment.order_id)
    return "cancelled"


def _handle_failed(payment_pk: int, payload: NotificationPayload) -> str:
    with transaction.atomic():
        payment = Payment.objects.select_for_update().select_related("user").get(pk=payment_pk)
        if payment.status == Status.FAILED:
            return "duplicate"
        if payment.status != Status.PENDING:
            return _skip(payment, payload, "ignored")
        payment.mark_failed(
            status_code=payload.status_code,
            status_message=payload.status_message,
            gateway_payment_id=payload.payment_id,
            raw=payload.raw(),
        )
        notify(
            payment.user,
            Notification.Type.PAYMENT_FAILED,
            "Payment Failed",
            f"Your payment of {payment.currency} {payment.amount} failed. Please try again.",
            priority=Notification.Priority.HIGH,
            metadata={
                "amount": payment.amount,
                "order_id": payment.order_id,
                "reason": payment.status_message,
                "action_url": "/packages",
            },
        )
    logger.info("payment_failed", order_id=payment.order_id, reason=payment.status_message)
    return "failed"


def _handle_chargeback(payment_pk: int, payload: NotificationPayload, now: datetime) -> str:
    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment_pk)
        if payment.status == Status.REFUNDED:
            return "duplicate"
        if payment.status != Status.SUCCESS:
            return _skip(payment, payload, "ignored")

        payment.mark_refunded(
            reason="Chargeback",
            amount=payload.payhere_amount,
            status_code=payload.status_code,
            refunded_at=now,
            raw=payload.raw(),
        )

        user = User.objects.select_for_update().get(pk=payment.user_id)
        revoked = user.membership_status == User.MembershipStatus.ACTIVE
        if revoked:
            # Release the slot the revoked membership holds
            held_package_id = user.membership_package_id or payment.package_id
            revoke_membership(user)
            release_member(held_package_id)

        notify(
            user,
            Notification.Type.PAYMENT_REFUNDED,
            "Payment Reversed",
            f"Your payment of {payment.currency} {payment.amount} (order {payment.order_id}) "
            "was charged back."
            + (" Your membership has been deactivated." if revoked else ""),
            priority=Notification.Priority.HIGH,
            metadata={
                "amount": payment.refund_amount,
                "order_id": payment.order_id,
                "membership_revoked": revoked,
            },
        )

    logger.warning(
        "payment_charged_back",
        order_id=payment.order_id,
        membership_revoked=revoked,
        **{"usr.id": payment.user_id},
    )
    return "refunded"


def reconcile_notification(
    payload: NotificationPayload, now: datetime | None = None
) -> ReconcileOutcome:
    """
    Apply one gateway notification.

    Raises:
        InvalidSignatureError: md5sig does not match. Nothing is touched.
        UnknownOrderError: No Payment with this order id.
    """
    now = now or timezone.now()

    if not verify_notification(payload):
        logger.warning(
            "payhere_webhook_invalid_signature",
            order_id=payload.order_id,
            status_code=payload.status_code,
        )
        raise InvalidSignatureError(payload.order_id)

    payment_pk = (
        Payment.objects.filter(order_id=payload.order_id).values_list("pk", flat=True).first()
    )
    if payment_pk is None:
        logger.warning("payhere_webhook_unknown_order", order_id=payload.order_id)
        raise UnknownOrderError(payload.order_id)

    status = parse_status_code(payload.status_code)
    logger.info(
        "payhere_notification_received",
        order_id=payload.order_id,
        status_code=payload.status_code,
    )

    match status:
        case GatewayStatus.SUCCESS:
            action = _handle_success(payment_pk, payload, now)
        case GatewayStatus.PENDING:
            action = _handle_pending(payment_pk, payload)
        case GatewayStatus.CANCELLED:
            action = _handle_cancelled(payment_pk, payload)
        case GatewayStatus.FAILED:
            action = _handle_failed(payment_pk, payload)
        case GatewayStatus.CHARGEDBACK:
            action = _handle_chargeback(payment_pk, payload, now)
        case _:
            logger.warning(
                "payment_notification_unknown_status",
                order_id=payload.order_id,
                status_code=payload.status_code,
            )
            action = "ignored"

    return ReconcileOutcome(order_id=payload.order_id, status_code=payload.status_code, action=action)


def cancel_stale_pending_payments(older_than_minutes: int, now: datetime | None = None) -> int:
    """
    Cancel pending payments the gateway never confirmed.

    Each payment is re-checked under lock, so a notification that lands
    mid-run wins. Returns the number cancelled.
    """
    now = now or timezone.now()
    cutoff = now - timedelta(minutes=older_than_minutes)
    stale_ids = list(
        Payment.objects.filter(status=Status.PENDING, created_at__lt=cutoff).values_list(
            "pk", flat=True
        )
    )

    cancelled = 0
    for payment_pk in stale_ids:
        with transaction.atomic():
            payment = Payment.objects.select_for_update().get(pk=payment_pk)
            if payment.status != Status.PENDING:
                continue
            payment.mark_cancelled(status_message=STALE_PAYMENT_MESSAGE)
            cancelled += 1

    if cancelled:
        logger.info(
            "stale_payments_cancelled", count=cancelled, older_than_minutes=older_than_minutes
        )
    return cancelled


# --- Reads ---


def get_payment_for_order(order_id: str, user: User) -> Payment:
    """
    Payment by order id, visible to its owner and staff.

    Raises:
        UnknownOrderError: No such order.
        PaymentAccessDeniedError: Someone else's payment.
    """
    payment = (
        Payment.objects.select_related("user", "package").filter(order_id=order_id).first()
    )
    if payment is None:
        raise UnknownOrderError(order_id)
    if payment.user_id != user.pk and not user.is_staff:
        raise PaymentAccessDeniedError("Not authorized to view this payment")
    return payment


def list_user_payments(user: User) -> QuerySet[Payment]:
    return Payment.objects.filter(user=user).select_related("package").order_by("-created_at")


def list_payments(
    status: str | None = None, page: int = 1, limit: int = 20
) -> tuple[list[Payment], int]:
    """One page of all payments, newest first. Returns (payments, total)."""
    queryset = Payment.objects.select_related("user", "package").order_by("-created_at")
    if status:
        queryset = queryset.filter(status=status)
    total = queryset.count()
    offset = (page - 1) * limit
    return list(queryset[offset : offset + limit]), total


def get_payment_stats(now: datetime | None = None) -> PaymentStats:
    now = now or timezone.now()

    counts = Payment.objects.aggregate(
        total=Count("pk"),
        success=Count("pk", filter=Q(status=Status.SUCCESS)),
        failed=Count("pk", filter=Q(status=Status.FAILED)),
        pending=Count("pk", filter=Q(status=Status.PENDING)),
        cancelled=Count("pk", filter=Q(status=Status.CANCELLED)),
        refunded=Count("pk", filter=Q(status=Status.REFUNDED)),
        revenue=Sum("amount", filter=Q(status=Status.SUCCESS)),
        monthly=Sum(
            "amount",
            filter=Q(status=Status.SUCCESS, created_at__gte=add_months(now, -1)),
        ),
    )
    total = counts["total"]
    return PaymentStats(
        total_payments=total,
        successful_payments=counts["success"],
        failed_payments=counts["failed"],
        pending_payments=counts["pending"],
        cancelled_payments=counts["cancelled"],
        refunded_payments=counts["refunded"],
        total_revenue=counts["revenue"] or Decimal("0"),
        monthly_revenue=counts["monthly"] or Decimal("0"),
        success_rate=(counts["success"] / total * 100) if total else 0.0,
    )
