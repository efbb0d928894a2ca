"""
Django Ninja API configuration.
"""

from django.http import HttpRequest, HttpResponse
from ninja import NinjaAPI
from ninja.errors import AuthenticationError

from apps.access.api import router as access_router
from apps.accounts.api import router as auth_router
from apps.approvals.api import router as approvals_router
from apps.core.exceptions import AuthenticationRequired, HarvestLogError, UpstreamUnavailable
from apps.core.logging import get_logger
from apps.organizations.api import router as organizations_router
from apps.reports.api import router as reports_router
from apps.souls.api import router as souls_router

logger = get_logger(__name__)

RETRY_AFTER_SECONDS = "1"

api = NinjaAPI(
    title="HarvestLog API",
    version="1.0.0",
    description="Church ministry records: souls won, evangelist approvals and reports.",
    openapi_extra={
        "info": {
            "contact": {"name": "API Support"},
        },
        "tags": [
            {"name": "auth", "description": "Registration, login and session management"},
            {"name": "access", "description": "Resolved roles and permissions"},
            {"name": "organizations", "description": "Churches, branches and evangelist rosters"},
            {"name": "approvals", "description": "Access requests and evangelist approval"},
            {"name": "souls", "description": "Recording and listing souls won"},
            {"name": "reports", "description": "Leaderboards, totals and CSV exports"},
            {"name": "health", "description": "Service health and readiness checks"},
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                    "description": "Stytch session JWT obtained from /auth/login or /auth/register. Include as: Authorization: Bearer <session_jwt>",
                }
            }
        },
    },
)

# Register routers
api.add_router("/auth", auth_router)
api.add_router("/access", access_router)
api.add_router("/organizations", organizations_router)
api.add_router("/approvals", approvals_router)
api.add_router("/souls", souls_router)
api.add_router("/reports", reports_router)


def _error_response(request: HttpRequest, exc: HarvestLogError) -> HttpResponse:
    response = api.create_response(
        request,
        {"detail": exc.message, "reason": exc.reason},
        status=exc.status_code,
    )
    if isinstance(exc, UpstreamUnavailable):
        response["Retry-After"] = RETRY_AFTER_SECONDS
    return response


@api.exception_handler(HarvestLogError)
def harvestlog_error(request: HttpRequest, exc: HarvestLogError) -> HttpResponse:
    """Render every domain error as {"detail", "reason"} with its status code."""
    if exc.status_code >= 500:
        logger.warning("request_unavailable", reason=exc.reason, detail=exc.message)
    elif exc.status_code in (403, 409):
        logger.warning("request_refused", reason=exc.reason, detail=exc.message)
    return _error_response(request, exc)


@api.exception_handler(AuthenticationError)
def authentication_error(request: HttpRequest, exc: AuthenticationError) -> HttpResponse:
    """Missing or rejected bearer token."""
    return _error_response(request, AuthenticationRequired("Not logged in."))


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
