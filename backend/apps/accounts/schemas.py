"""
Account API schemas - Pydantic models for request/response.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    """Current user's profile, including read-only membership summary."""

    id: int
    email: str
    name: str
    phone: str
    membership_status: str
    membership_plan: str
    membership_end_date: datetime | None
    notify_email: bool
    notify_in_app: bool
    reminder_days: list[int]
    auto_renew: bool


class ProfileUpdateRequest(BaseModel):
    """
    Profile update.

    Membership fields are deliberately absent; they can only change through
    payments and the daily lifecycle sweep.
    """

    name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=32)
    notify_email: bool | None = None
    notify_in_app: bool | None = None
    reminder_days: list[int] | None = Field(
        default=None,
        description="Days before membership end to send reminders, e.g. [7, 3, 1]",
    )
    auto_renew: bool | None = None
