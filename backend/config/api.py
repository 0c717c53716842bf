"""
Django Ninja API configuration.
"""

from django.http import HttpRequest
from ninja import NinjaAPI

from apps.accounts.api import router as accounts_router
from apps.memberships.api import router as memberships_router
from apps.notifications.api import router as notifications_router
from apps.packages.api import router as packages_router
from apps.payments.api import router as payments_router

api = NinjaAPI(
    title="Gym Membership API",
    version="1.0.0",
    description="Membership packages, PayHere checkout and membership lifecycle.",
    openapi_extra={
        "info": {
            "contact": {"name": "API Support"},
        },
        "tags": [
            {"name": "accounts", "description": "Signed-in member profile"},
            {"name": "packages", "description": "Membership package catalog"},
            {"name": "payments", "description": "Checkout initiation and payment history"},
            {"name": "memberships", "description": "Membership status, stats and lifecycle sweep"},
            {"name": "notifications", "description": "In-app notifications"},
            {"name": "health", "description": "Service health and readiness checks"},
        ],
    },
)

# Register routers
api.add_router("/accounts", accounts_router)
api.add_router("/packages", packages_router)
api.add_router("/payments", payments_router)
api.add_router("/memberships", memberships_router)
api.add_router("/notifications", notifications_router)


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
