"""
Accounts models - gym members and staff.

Membership state lives on the User row. Only the payment reconciler and the
lifecycle sweeper write the membership fields (see MEMBERSHIP_FIELDS).
"""

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models


def default_reminder_days() -> list[int]:
    return [7, 3, 1]


class UserManager(BaseUserManager):
    """Custom manager for User model."""

    def create_user(
        self,
        email: str,
        password: str | None = None,
        **extra_fields,
    ) -> "User":
        """Create and return a regular user."""
        if not email:
            raise ValueError("Email is required")

        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(
        self,
        email: str,
        password: str | None = None,
        **extra_fields,
    ) -> "User":
        """Create and return a superuser (for Django admin access)."""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Gym user - member or staff.

    Carries the embedded membership state:
    inactive -> active -> grace_period -> expired, with active reachable
    again only through a new successful payment.
    """

    class MembershipStatus(models.TextChoices):
        INACTIVE = "inactive", "Inactive"
        ACTIVE = "active", "Active"
        GRACE_PERIOD = "grace_period", "Grace Period"
        EXPIRED = "expired", "Expired"

    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)

    # Membership state
    membership_status = models.CharField(
        max_length=20,
        choices=MembershipStatus.choices,
        default=MembershipStatus.INACTIVE,
        db_index=True,
    )
    membership_package = models.ForeignKey(
        "packages.Package",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="members",
        help_text="Package the current (or last) membership was bought with",
    )
    membership_plan = models.CharField(
        max_length=20,
        blank=True,
        help_text="Category of the package, e.g. 'premium'",
    )
    membership_start_date = models.DateTimeField(null=True, blank=True)
    membership_end_date = models.DateTimeField(null=True, blank=True, db_index=True)
    grace_period_end_date = models.DateTimeField(null=True, blank=True, db_index=True)
    auto_renew = models.BooleanField(
        default=False,
        help_text="Informational only; renewal always requires a new payment",
    )
    last_payment_date = models.DateTimeField(null=True, blank=True)

    # Notification preferences
    notify_email = models.BooleanField(default=True)
    notify_in_app = models.BooleanField(default=True)
    reminder_days = models.JSONField(
        default=default_reminder_days,
        help_text="Lead times (days before end date) for expiry reminders",
    )

    # Django auth compatibility
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(
        default=False,
        help_text="Gym staff; can access admin-only endpoints and Django admin",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["membership_status", "membership_end_date"],
                name="user_status_end_date_idx",
            ),
            models.Index(
                fields=["membership_status", "grace_period_end_date"],
                name="user_status_grace_end_idx",
            ),
        ]

    def __str__(self) -> str:
        return self.email

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""

    @property
    def last_name(self) -> str:
        parts = self.name.split(" ")
        return parts[1] if len(parts) > 1 else ""

    def wants_reminder(self, days: int) -> bool:
        """Check whether the user opted into a reminder N days before expiry."""
        return days in (self.reminder_days or [])


# Fields owned by the reconciler and the sweeper. Profile editors must not write them.
MEMBERSHIP_FIELDS = frozenset(
    {
        "membership_status",
        "membership_package",
        "membership_package_id",
        "membership_plan",
        "membership_start_date",
        "membership_end_date",
        "grace_period_end_date",
        "last_payment_date",
    }
)
