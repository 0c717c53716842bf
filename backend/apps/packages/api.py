"""
Package catalog API endpoints.

Listing and detail are public; stats are staff only.
"""

from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.core.schemas import ErrorResponse
from apps.core.security import MemberSessionAuth, require_staff
from apps.packages.models import Package
from apps.packages.schemas import PackageListResponse, PackageResponse, PackageStatsResponse
from apps.packages.services import get_package, get_package_stats, list_packages

router = Router(tags=["packages"])
session_auth = MemberSessionAuth()


@router.get(
    "/",
    response=PackageListResponse,
    operation_id="listPackages",
    summary="List membership packages",
)
def list_packages_endpoint(
    request: HttpRequest, active: bool | None = None, category: str | None = None
) -> PackageListResponse:
    """List packages, optionally filtered by active flag and category."""
    packages = [PackageResponse.model_validate(p) for p in list_packages(active, category)]
    return PackageListResponse(count=len(packages), packages=packages)


@router.get(
    "/{package_id}",
    response={200: PackageResponse, 404: ErrorResponse},
    operation_id="getPackage",
    summary="Get package details",
)
def get_package_endpoint(request: HttpRequest, package_id: int) -> PackageResponse:
    try:
        package = get_package(package_id)
    except Package.DoesNotExist:
        raise HttpError(404, "Package not found") from None
    return PackageResponse.model_validate(package)


@router.get(
    "/{package_id}/stats",
    response={200: PackageStatsResponse, 401: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    auth=session_auth,
    operation_id="getPackageStats",
    summary="Get package member statistics",
)
@require_staff
def get_package_stats_endpoint(request: HttpRequest, package_id: int) -> PackageStatsResponse:
    """Member counts per membership status and remaining capacity. Staff only."""
    try:
        package = get_package(package_id)
    except Package.DoesNotExist:
        raise HttpError(404, "Package not found") from None

    stats = get_package_stats(package)
    return PackageStatsResponse(
        package=PackageResponse.model_validate(package),
        active_members=stats.active_members,
        grace_period_members=stats.grace_period_members,
        expired_members=stats.expired_members,
        total_members=stats.total_members,
        available_slots=stats.available_slots,
    )
