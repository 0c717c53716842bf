"""
Account API endpoints - the signed-in user's profile.
"""

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.accounts.models import User
from apps.accounts.schemas import ProfileResponse, ProfileUpdateRequest
from apps.accounts.services import ProtectedFieldError, update_profile
from apps.core.schemas import ErrorResponse
from apps.core.security import MemberSessionAuth, get_auth_user

router = Router(tags=["accounts"])
session_auth = MemberSessionAuth()


def _to_profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.pk,
        email=user.email,
        name=user.name,
        phone=user.phone,
        membership_status=user.membership_status,
        membership_plan=user.membership_plan,
        membership_end_date=user.membership_end_date,
        notify_email=user.notify_email,
        notify_in_app=user.notify_in_app,
        reminder_days=list(user.reminder_days or []),
        auto_renew=user.auto_renew,
    )


@router.get(
    "/me",
    response={200: ProfileResponse, 401: ErrorResponse},
    auth=session_auth,
    operation_id="getProfile",
    summary="Get current user's profile",
)
def get_profile(request: HttpRequest) -> ProfileResponse:
    """Return the signed-in user's profile."""
    return _to_profile(get_auth_user(request))


@router.patch(
    "/me",
    response={200: ProfileResponse, 400: ErrorResponse, 401: ErrorResponse},
    auth=session_auth,
    operation_id="updateProfile",
    summary="Update current user's profile",
)
def update_profile_endpoint(request: HttpRequest, payload: ProfileUpdateRequest) -> ProfileResponse:
    """Update editable profile fields. Membership fields are never writable here."""
    user = get_auth_user(request)
    changes = payload.model_dump(exclude_none=True)
    if not changes:
        return _to_profile(user)

    try:
        user = update_profile(user, **changes)
    except (ProtectedFieldError, ValueError) as e:
        raise HttpError(400, str(e)) from None

    return _to_profile(user)
