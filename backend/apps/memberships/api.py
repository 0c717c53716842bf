"""
Membership API endpoints.

Members read their own membership; staff get aggregate stats, the
expiring list and a manual sweep trigger.
"""

from django.http import HttpRequest
from django.utils import timezone
from ninja import Router

from apps.core.logging import get_logger
from apps.core.schemas import ErrorResponse
from apps.core.security import MemberSessionAuth, get_auth_user, require_staff
from apps.memberships.schemas import (
    ExpiringMemberResponse,
    ExpiringMembersResponse,
    MembershipResponse,
    MembershipStatsResponse,
    SweepRequest,
    SweepResponse,
)
from apps.memberships.services import days_remaining, get_expiring_memberships, get_membership_stats
from apps.memberships.sweeper import run_sweep

logger = get_logger(__name__)

router = Router(tags=["memberships"])
session_auth = MemberSessionAuth()


@router.get(
    "/me",
    response={200: MembershipResponse, 401: ErrorResponse},
    auth=session_auth,
    operation_id="getMyMembership",
    summary="Get current user's membership",
)
def get_my_membership(request: HttpRequest) -> MembershipResponse:
    user = get_auth_user(request)
    package = user.membership_package
    return MembershipResponse(
        status=user.membership_status,
        package_id=package.pk if package else None,
        package_name=package.name if package else None,
        plan=user.membership_plan,
        start_date=user.membership_start_date,
        end_date=user.membership_end_date,
        grace_period_end_date=user.grace_period_end_date,
        days_remaining=days_remaining(user),
        last_payment_date=user.last_payment_date,
    )


@router.get(
    "/stats",
    response={200: MembershipStatsResponse, 401: ErrorResponse, 403: ErrorResponse},
    auth=session_auth,
    operation_id="getMembershipStats",
    summary="Membership counts by status",
)
@require_staff
def get_stats(request: HttpRequest) -> MembershipStatsResponse:
    stats = get_membership_stats()
    return MembershipStatsResponse(
        total_members=stats.total_members,
        active_members=stats.active_members,
        grace_period_members=stats.grace_period_members,
        expired_members=stats.expired_members,
        expiring_soon=stats.expiring_soon,
    )


@router.get(
    "/expiring",
    response={200: ExpiringMembersResponse, 401: ErrorResponse, 403: ErrorResponse},
    auth=session_auth,
    operation_id="listExpiringMemberships",
    summary="Active memberships ending within N days",
)
@require_staff
def list_expiring(request: HttpRequest, days: int = 7) -> ExpiringMembersResponse:
    days = max(1, min(days, 90))
    now = timezone.now()
    members = [
        ExpiringMemberResponse(
            user_id=user.pk,
            email=user.email,
            name=user.name,
            package_name=user.membership_package.name if user.membership_package else None,
            end_date=user.membership_end_date,
            days_remaining=days_remaining(user, now),
        )
        for user in get_expiring_memberships(days=days, now=now)
    ]
    return ExpiringMembersResponse(days=days, count=len(members), members=members)


@router.post(
    "/sweep",
    response={200: SweepResponse, 401: ErrorResponse, 403: ErrorResponse},
    auth=session_auth,
    operation_id="runMembershipSweep",
    summary="Run the daily lifecycle sweep now",
)
@require_staff
def trigger_sweep(request: HttpRequest, payload: SweepRequest) -> SweepResponse:
    """Manually run the sweep (normally scheduled once a day)."""
    logger.info("membership_sweep_triggered", **{"usr.id": request.auth.pk})
    result = run_sweep(reminder_days=payload.reminder_days, dry_run=payload.dry_run)
    return SweepResponse(**result.as_dict())
