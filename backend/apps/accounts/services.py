"""
Account services - profile updates that stay clear of membership state.
"""

from typing import Any

from apps.accounts.models import MEMBERSHIP_FIELDS, User
from apps.core.logging import get_logger

logger = get_logger(__name__)

EDITABLE_PROFILE_FIELDS = frozenset(
    {"name", "phone", "notify_email", "notify_in_app", "reminder_days", "auto_renew"}
)


class ProtectedFieldError(Exception):
    """Raised when a profile update tries to write membership state."""

    def __init__(self, fields: set[str]):
        super().__init__(f"Membership fields cannot be edited: {', '.join(sorted(fields))}")
        self.fields = fields


def update_profile(user: User, **changes: Any) -> User:
    """
    Apply profile changes to a user.

    Membership fields are owned by payment reconciliation and the lifecycle
    sweep; passing any of them raises ProtectedFieldError without saving.
    Unknown fields raise ValueError.
    """
    protected = set(changes) & MEMBERSHIP_FIELDS
    if protected:
        logger.warning(
            "profile_update_membership_fields_rejected",
            fields=sorted(protected),
            **{"usr.id": user.pk},
        )
        raise ProtectedFieldError(protected)

    unknown = set(changes) - EDITABLE_PROFILE_FIELDS
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    if "reminder_days" in changes:
        changes["reminder_days"] = sorted(
            {int(d) for d in changes["reminder_days"] if int(d) > 0}, reverse=True
        )

    for field, value in changes.items():
        setattr(user, field, value)
    user.save(update_fields=[*changes.keys(), "updated_at"])
    return user
