"""
Django Ninja API configuration.
"""

from django.http import HttpRequest, HttpResponse
from ninja import NinjaAPI

from apps.billing.api import router as payfirst_router
from apps.core.exceptions import DomainError
from apps.core.logging import get_logger
from apps.memberships.api import router as memberships_router
from apps.pricing.api import router as pricing_router

logger = get_logger(__name__)

api = NinjaAPI(
    title="Seat Registration API",
    version="1.0.0",
    description="Seat availability, pricing and payment-first registration with Stripe.",
    openapi_extra={
        "info": {
            "contact": {"name": "API Support"},
        },
        "tags": [
            {
                "name": "memberships",
                "description": "Seat availability, quotes and seat administration",
            },
            {
                "name": "payfirst",
                "description": "Payment-first registration: orders, confirmation and status",
            },
            {
                "name": "pricing",
                "description": "Discount administration",
            },
            {
                "name": "health",
                "description": "Service health and readiness checks",
            },
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "description": "Admin API token (ADMIN_API_TOKEN). Include as: Authorization: Bearer <token>",
                }
            }
        },
    },
)

# Register routers
api.add_router("/memberships", memberships_router)
api.add_router("/memberships", payfirst_router)
api.add_router("/pricing", pricing_router)


@api.exception_handler(DomainError)
def domain_error_handler(request: HttpRequest, exc: DomainError) -> HttpResponse:
    """Map domain errors to ``{"detail", "code"}`` with the error's HTTP status."""
    body = {"detail": exc.message, "code": exc.code}
    if getattr(exc, "refund_required", False):
        body["refund_required"] = True
        body["reason"] = getattr(exc, "reason", None)
    if exc.status_code >= 500:
        logger.error("api_domain_error", code=exc.code, detail=exc.message)
    return api.create_response(request, body, status=exc.status_code)


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
