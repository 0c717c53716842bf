"""
Package API schemas.
"""

from decimal import Decimal

from ninja import Schema


class PackageResponse(Schema):
    """Public package details."""

    id: int
    name: str
    description: str
    category: str
    price: Decimal
    discount: Decimal
    discounted_price: Decimal
    duration_months: int
    features: list[str]
    max_members: int | None
    current_members: int
    available_slots: int | None
    is_active: bool
    is_available: bool


class PackageListResponse(Schema):
    count: int
    packages: list[PackageResponse]


class PackageStatsResponse(Schema):
    """Member counts for a package (staff only)."""

    package: PackageResponse
    active_members: int
    grace_period_members: int
    expired_members: int
    total_members: int
    available_slots: int | None
