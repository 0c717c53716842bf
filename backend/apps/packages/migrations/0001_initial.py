from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Package",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                ("description", models.CharField(max_length=500)),
                (
                    "category",
                    models.CharField(
                        choices=[("basic", "Basic"), ("premium", "Premium"), ("vip", "VIP"), ("custom", "Custom")],
                        db_index=True,
                        default="custom",
                        max_length=20,
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "duration_months",
                    models.PositiveSmallIntegerField(
                        help_text="Membership length bought by one payment",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(24),
                        ],
                    ),
                ),
                (
                    "discount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Discount percentage (0-100)",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("100")),
                        ],
                    ),
                ),
                (
                    "max_members",
                    models.PositiveIntegerField(blank=True, help_text="Capacity limit. Empty means unlimited.", null=True),
                ),
                (
                    "current_members",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Members currently holding a slot (active or in grace period)",
                    ),
                ),
                ("features", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
            ],
            options={
                "ordering": ["category", "price"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(current_members__gte=0),
                        name="package_current_members_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(discount__gte=0) & models.Q(discount__lte=100),
                        name="package_discount_percentage",
                    ),
                ],
            },
        ),
    ]
