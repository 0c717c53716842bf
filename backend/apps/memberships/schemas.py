"""
Membership API schemas.
"""

from datetime import datetime

from ninja import Schema


class MembershipResponse(Schema):
    """Membership summary for the signed-in member."""

    status: str
    package_id: int | None
    package_name: str | None
    plan: str
    start_date: datetime | None
    end_date: datetime | None
    grace_period_end_date: datetime | None
    days_remaining: int
    last_payment_date: datetime | None


class MembershipStatsResponse(Schema):
    total_members: int
    active_members: int
    grace_period_members: int
    expired_members: int
    expiring_soon: int


class ExpiringMemberResponse(Schema):
    user_id: int
    email: str
    name: str
    package_name: str | None
    end_date: datetime
    days_remaining: int


class ExpiringMembersResponse(Schema):
    days: int
    count: int
    members: list[ExpiringMemberResponse]


class SweepRequest(Schema):
    reminder_days: list[int] | None = None
    dry_run: bool = False


class SweepResponse(Schema):
    grace_warnings: int
    suspended: int
    expired: int
    reminders: dict[str, int]
    stale_payments_cancelled: int
    errors: int
    dry_run: bool
