"""
Notification API schemas.
"""

from datetime import datetime
from typing import Any

from ninja import Schema


class NotificationResponse(Schema):
    id: int
    title: str
    message: str
    type: str
    priority: str
    is_read: bool
    metadata: dict[str, Any]
    created_at: datetime


class NotificationListResponse(Schema):
    unread_count: int
    notifications: list[NotificationResponse]


class MarkReadResponse(Schema):
    updated: int
