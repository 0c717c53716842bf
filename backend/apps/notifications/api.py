"""
Notification API endpoints for the signed-in member.
"""

from django.http import HttpRequest
from ninja import Router

from apps.core.schemas import ErrorResponse
from apps.core.security import MemberSessionAuth, get_auth_user
from apps.notifications.models import Notification
from apps.notifications.schemas import (
    MarkReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from apps.notifications.services import mark_all_read, unread_count

router = Router(tags=["notifications"])
session_auth = MemberSessionAuth()


@router.get(
    "/",
    response={200: NotificationListResponse, 401: ErrorResponse},
    auth=session_auth,
    operation_id="listNotifications",
    summary="List my notifications",
)
def list_notifications(
    request: HttpRequest, unread_only: bool = False, limit: int = 50
) -> NotificationListResponse:
    user = get_auth_user(request)
    queryset = Notification.objects.filter(user=user)
    if unread_only:
        queryset = queryset.filter(is_read=False)
    notifications = [
        NotificationResponse.model_validate(n) for n in queryset[: max(1, min(limit, 100))]
    ]
    return NotificationListResponse(unread_count=unread_count(user), notifications=notifications)


@router.post(
    "/read-all",
    response={200: MarkReadResponse, 401: ErrorResponse},
    auth=session_auth,
    operation_id="markAllNotificationsRead",
    summary="Mark all my notifications as read",
)
def mark_all_read_endpoint(request: HttpRequest) -> MarkReadResponse:
    return MarkReadResponse(updated=mark_all_read(get_auth_user(request)))
