"""Memberships app configuration."""

from django.apps import AppConfig


class MembershipsConfig(AppConfig):
    """Membership lifecycle: state transitions and the daily sweep."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.memberships"
