"""
Payment API schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from ninja import Schema
from pydantic import Field

from apps.core.schemas import PaginationMeta


class InitiatePaymentRequest(Schema):
    package_id: int = Field(gt=0)


class PaymentResponse(Schema):
    id: int
    order_id: str
    package_id: int
    package_name: str
    amount: Decimal
    currency: str
    status: str
    payment_method: str
    gateway_payment_id: str
    status_message: str
    membership_start_date: datetime | None
    membership_end_date: datetime | None
    refund_amount: Decimal | None
    refunded_at: datetime | None
    created_at: datetime


class AdminPaymentResponse(PaymentResponse):
    user_id: int
    user_email: str
    user_name: str


class InitiatePaymentResponse(Schema):
    """Pending payment plus the fields the frontend posts to the gateway."""

    payment: PaymentResponse
    payment_data: dict[str, Any]


class PaymentListResponse(Schema):
    count: int
    payments: list[PaymentResponse]


class AdminPaymentListResponse(Schema):
    payments: list[AdminPaymentResponse]
    pagination: PaginationMeta


class PaymentStatsResponse(Schema):
    total_payments: int
    successful_payments: int
    failed_payments: int
    pending_payments: int
    cancelled_payments: int
    refunded_payments: int
    total_revenue: Decimal
    monthly_revenue: Decimal
    success_rate: float
