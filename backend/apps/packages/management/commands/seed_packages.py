"""
Management command to create the default membership packages.

Idempotent: packages are matched by name and updated in place, so existing
payments keep pointing at the same rows.
Usage: python manage.py seed_packages
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.packages.models import Package

DEFAULT_PACKAGES = [
    {
        "name": "Basic - 1 Month",
        "description": "Perfect for beginners starting their fitness journey",
        "duration_months": 1,
        "price": Decimal("1500"),
        "category": Package.Category.BASIC,
        "discount": Decimal("0"),
        "features": [
            "Gym access during off-peak hours",
            "Basic equipment usage",
            "Locker facilities",
            "Free fitness assessment",
        ],
    },
    {
        "name": "Premium - 6 Months",
        "description": "Great value package for committed fitness enthusiasts",
        "duration_months": 6,
        "price": Decimal("9000"),
        "category": Package.Category.PREMIUM,
        "discount": Decimal("11"),
        "features": [
            "24/7 gym access",
            "All equipment & classes",
            "Personal trainer session/month",
            "Nutrition consultation",
            "Priority class booking",
        ],
    },
    {
        "name": "VIP - 1 Year",
        "description": "Ultimate fitness package with maximum savings",
        "duration_months": 12,
        "price": Decimal("18000"),
        "category": Package.Category.VIP,
        "discount": Decimal("17"),
        "features": [
            "All Premium features",
            "Unlimited personal training",
            "Spa & sauna access",
            "Guest passes (2/month)",
            "Nutrition & diet planning",
        ],
    },
]


class Command(BaseCommand):
    help = "Create or update the default membership packages"

    def handle(self, *args, **options):
        with transaction.atomic():
            for data in DEFAULT_PACKAGES:
                defaults = {k: v for k, v in data.items() if k != "name"}
                package, created = Package.objects.update_or_create(
                    name=data["name"], defaults={**defaults, "is_active": True}
                )
                action = "Created" if created else "Updated"
                self.stdout.write(
                    f"{action} package: {package.name} - "
                    f"{package.discounted_price} (list {package.price})"
                )

        self.stdout.write(
            self.style.SUCCESS(f"Seeded {len(DEFAULT_PACKAGES)} membership packages")
        )
