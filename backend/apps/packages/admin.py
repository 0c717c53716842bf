"""
Admin configuration for packages app.
"""

from django.contrib import admin

from apps.packages.models import Package


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    """Admin for membership packages. The member counter is read-only."""

    list_display = [
        "name",
        "category",
        "price",
        "discount",
        "duration_months",
        "current_members",
        "max_members",
        "is_active",
    ]
    list_filter = ["category", "is_active"]
    search_fields = ["name"]
    readonly_fields = ["current_members", "created_at", "updated_at"]
