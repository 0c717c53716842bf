"""
Package catalog models - membership packages sold at the gym.
"""

from decimal import ROUND_HALF_UP, Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.core.models import TimestampedModel

CENT = Decimal("0.01")


class Package(TimestampedModel):
    """
    Membership package.

    current_members is a shared counter: only payment reconciliation
    increments it and only suspension/chargeback release it. Writers go
    through apps.packages.services so every change is a single UPDATE.
    """

    class Category(models.TextChoices):
        BASIC = "basic", "Basic"
        PREMIUM = "premium", "Premium"
        VIP = "vip", "VIP"
        CUSTOM = "custom", "Custom"

    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.CUSTOM,
        db_index=True,
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    duration_months = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(24)],
        help_text="Membership length bought by one payment",
    )
    discount = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text="Discount percentage (0-100)",
    )
    max_members = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Capacity limit. Empty means unlimited.",
    )
    current_members = models.PositiveIntegerField(
        default=0,
        help_text="Members currently holding a slot (active or in grace period)",
    )
    features = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["category", "price"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_members__gte=0),
                name="package_current_members_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(discount__gte=0) & models.Q(discount__lte=100),
                name="package_discount_percentage",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.category})"

    @property
    def discounted_price(self) -> Decimal:
        """Price after discount, rounded to cents."""
        price = Decimal(self.price)
        discount = Decimal(self.discount or 0)
        if discount <= 0:
            return price.quantize(CENT, rounding=ROUND_HALF_UP)
        return (price - price * discount / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def available_slots(self) -> int | None:
        """Remaining capacity, or None when the package is unlimited."""
        if self.max_members is None:
            return None
        return max(0, self.max_members - self.current_members)

    @property
    def is_full(self) -> bool:
        return self.max_members is not None and self.current_members >= self.max_members

    @property
    def is_available(self) -> bool:
        """Active and not at capacity."""
        return self.is_active and not self.is_full
