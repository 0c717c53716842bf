import django.db.models.deletion
from django.db import migrations, models

import apps.accounts.models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
        ("packages", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                ("email", models.EmailField(db_index=True, max_length=254, unique=True)),
                ("name", models.CharField(blank=True, max_length=255)),
                ("phone", models.CharField(blank=True, max_length=32)),
                (
                    "membership_status",
                    models.CharField(
                        choices=[
                            ("inactive", "Inactive"),
                            ("active", "Active"),
                            ("grace_period", "Grace Period"),
                            ("expired", "Expired"),
                        ],
                        db_index=True,
                        default="inactive",
                        max_length=20,
                    ),
                ),
                (
                    "membership_plan",
                    models.CharField(blank=True, help_text="Category of the package, e.g. 'premium'", max_length=20),
                ),
                ("membership_start_date", models.DateTimeField(blank=True, null=True)),
                ("membership_end_date", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("grace_period_end_date", models.DateTimeField(blank=True, db_index=True, null=True)),
                (
                    "auto_renew",
                    models.BooleanField(
                        default=False,
                        help_text="Informational only; renewal always requires a new payment",
                    ),
                ),
                ("last_payment_date", models.DateTimeField(blank=True, null=True)),
                ("notify_email", models.BooleanField(default=True)),
                ("notify_in_app", models.BooleanField(default=True)),
                (
                    "reminder_days",
                    models.JSONField(
                        default=apps.accounts.models.default_reminder_days,
                        help_text="Lead times (days before end date) for expiry reminders",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Gym staff; can access admin-only endpoints and Django admin",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "membership_package",
                    models.ForeignKey(
                        blank=True,
                        help_text="Package the current (or last) membership was bought with",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="members",
                        to="packages.package",
                    ),
                ),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["membership_status", "membership_end_date"],
                        name="user_status_end_date_idx",
                    ),
                    models.Index(
                        fields=["membership_status", "grace_period_end_date"],
                        name="user_status_grace_end_idx",
                    ),
                ],
            },
            managers=[
                ("objects", apps.accounts.models.UserManager()),
            ],
        ),
    ]
