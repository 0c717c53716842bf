import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("packages", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order_id",
                    models.CharField(
                        help_text="Merchant order reference, e.g. 'ORDER_1700000000000_42'",
                        max_length=100,
                        unique=True,
                    ),
                ),
                ("merchant_id", models.CharField(max_length=50)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "currency",
                    models.CharField(
                        choices=[("LKR", "Sri Lankan Rupee"), ("USD", "US Dollar")],
                        default="LKR",
                        max_length=3,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("success", "Success"),
                            ("failed", "Failed"),
                            ("cancelled", "Cancelled"),
                            ("refunded", "Refunded"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("payment_method", models.CharField(default="PayHere", max_length=50)),
                ("gateway_payment_id", models.CharField(blank=True, db_index=True, max_length=100)),
                ("gateway_status_code", models.IntegerField(blank=True, null=True)),
                ("status_message", models.CharField(blank=True, max_length=500)),
                ("card_holder_name", models.CharField(blank=True, max_length=100)),
                (
                    "card_no",
                    models.CharField(blank=True, help_text="Masked, as sent by the gateway", max_length=30),
                ),
                ("membership_start_date", models.DateTimeField(blank=True, null=True)),
                ("membership_end_date", models.DateTimeField(blank=True, null=True)),
                ("refund_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("refund_reason", models.CharField(blank=True, max_length=500)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "package",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="packages.package",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="payment_user_created_idx"),
                    models.Index(fields=["status", "-created_at"], name="payment_status_created_idx"),
                ],
            },
        ),
    ]
