"""Packages app configuration."""

from django.apps import AppConfig


class PackagesConfig(AppConfig):
    """Configuration for the membership package catalog."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.packages"
    verbose_name = "Membership Packages"
