"""
Admin configuration for accounts app.
"""

from django.contrib import admin

from apps.accounts.models import MEMBERSHIP_FIELDS, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin for gym users. Membership state is read-only here."""

    list_display = [
        "email",
        "name",
        "membership_status",
        "membership_plan",
        "membership_end_date",
        "is_staff",
    ]
    list_filter = ["membership_status", "membership_plan", "is_staff"]
    search_fields = ["email", "name", "phone"]
    readonly_fields = sorted(MEMBERSHIP_FIELDS - {"membership_package_id"}) + [
        "created_at",
        "updated_at",
    ]
    exclude = ["password"]
