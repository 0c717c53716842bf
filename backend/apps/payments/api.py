"""
Payment API endpoints.

Initiation and own-payment reads for members; the full ledger and revenue
stats for staff. Gateway notifications arrive through
apps.payments.webhooks, not this router.
"""

import math

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.core.schemas import ErrorResponse, PaginationMeta
from apps.core.security import MemberSessionAuth, get_auth_user, require_staff
from apps.core.utils import get_client_ip, get_user_agent
from apps.payments.exceptions import (
    PackageNotFoundError,
    PaymentAccessDeniedError,
    PaymentValidationError,
    UnknownOrderError,
    UserNotFoundError,
)
from apps.payments.models import Payment
from apps.payments.schemas import (
    AdminPaymentListResponse,
    AdminPaymentResponse,
    InitiatePaymentRequest,
    InitiatePaymentResponse,
    PaymentListResponse,
    PaymentResponse,
    PaymentStatsResponse,
)
from apps.payments.services import (
    get_payment_for_order,
    get_payment_stats,
    initiate_payment,
    list_payments,
    list_user_payments,
)

router = Router(tags=["payments"])
session_auth = MemberSessionAuth()


def _to_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.pk,
        order_id=payment.order_id,
        package_id=payment.package_id,
        package_name=payment.package.name,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
        payment_method=payment.payment_method,
        gateway_payment_id=payment.gateway_payment_id,
        status_message=payment.status_message,
        membership_start_date=payment.membership_start_date,
        membership_end_date=payment.membership_end_date,
        refund_amount=payment.refund_amount,
        refunded_at=payment.refunded_at,
        created_at=payment.created_at,
    )


@router.post(
    "/initiate",
    response={201: InitiatePaymentResponse, 400: ErrorResponse, 401: ErrorResponse, 404: ErrorResponse},
    auth=session_auth,
    operation_id="initiatePayment",
    summary="Start a checkout for a membership package",
)
def initiate_payment_endpoint(
    request: HttpRequest, payload: InitiatePaymentRequest
) -> tuple[int, InitiatePaymentResponse]:
    """
    Create a pending payment and return the signed gateway form.

    Rejected when the member still has a running membership or a recent
    pending payment, or when the package is inactive or full.
    """
    user = get_auth_user(request)
    try:
        initiation = initiate_payment(
            user_id=user.pk,
            package_id=payload.package_id,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
        )
    except (PackageNotFoundError, UserNotFoundError) as e:
        raise HttpError(404, str(e)) from None
    except PaymentValidationError as e:
        raise HttpError(400, str(e)) from None

    return 201, InitiatePaymentResponse(
        payment=_to_response(initiation.payment),
        payment_data=initiation.form,
    )


@router.get(
    "/order/{order_id}",
    response={200: PaymentResponse, 401: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    auth=session_auth,
    operation_id="getPaymentByOrderId",
    summary="Get a payment by order id",
)
def get_payment_by_order(request: HttpRequest, order_id: str) -> PaymentResponse:
    try:
        payment = get_payment_for_order(order_id, get_auth_user(request))
    except UnknownOrderError:
        raise HttpError(404, "Payment not found") from None
    except PaymentAccessDeniedError as e:
        raise HttpError(403, str(e)) from None
    return _to_response(payment)


@router.get(
    "/me",
    response={200: PaymentListResponse, 401: ErrorResponse},
    auth=session_auth,
    operation_id="listMyPayments",
    summary="Get current user's payment history",
)
def list_my_payments(request: HttpRequest) -> PaymentListResponse:
    payments = [_to_response(p) for p in list_user_payments(get_auth_user(request))]
    return PaymentListResponse(count=len(payments), payments=payments)


@router.get(
    "/",
    response={200: AdminPaymentListResponse, 401: ErrorResponse, 403: ErrorResponse},
    auth=session_auth,
    operation_id="listPayments",
    summary="List all payments",
)
@require_staff
def list_all_payments(
    request: HttpRequest, status: str | None = None, page: int = 1, limit: int = 20
) -> AdminPaymentListResponse:
    page = max(1, page)
    limit = max(1, min(limit, 100))
    payments, total = list_payments(status=status, page=page, limit=limit)
    return AdminPaymentListResponse(
        payments=[
            AdminPaymentResponse(
                **_to_response(p).model_dump(),
                user_id=p.user_id,
                user_email=p.user.email,
                user_name=p.user.name,
            )
            for p in payments
        ],
        pagination=PaginationMeta(total=total, pages=math.ceil(total / limit), current_page=page),
    )


@router.get(
    "/stats",
    response={200: PaymentStatsResponse, 401: ErrorResponse, 403: ErrorResponse},
    auth=session_auth,
    operation_id="getPaymentStats",
    summary="Payment counts and revenue",
)
@require_staff
def payment_stats(request: HttpRequest) -> PaymentStatsResponse:
    stats = get_payment_stats()
    return PaymentStatsResponse(
        total_payments=stats.total_payments,
        successful_payments=stats.successful_payments,
        failed_payments=stats.failed_payments,
        pending_payments=stats.pending_payments,
        cancelled_payments=stats.cancelled_payments,
        refunded_payments=stats.refunded_payments,
        total_revenue=stats.total_revenue,
        monthly_revenue=stats.monthly_revenue,
        success_rate=stats.success_rate,
    )
