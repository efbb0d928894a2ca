"""
Core middleware.

RequestContextMiddleware binds request-scoped logging context.
StytchAuthMiddleware verifies bearer session JWTs and attaches a RequestAuth.
"""

import time
from collections.abc import Callable
from uuid import uuid4

from django.http import HttpRequest, HttpResponse

from apps.core.auth import RequestAuth
from apps.core.exceptions import AuthenticationRequired, UpstreamUnavailable
from apps.core.logging import bind_contextvars, clear_contextvars, get_logger
from apps.core.security import get_bearer_token
from apps.core.utils import get_client_ip

logger = get_logger(__name__)

# Paths that never carry a session
PUBLIC_PATH_PREFIXES = (
    "/admin/",
    "/api/v1/health",
    "/api/v1/docs",
    "/api/v1/openapi.json",
    "/api/v1/auth/login",
    "/api/v1/auth/logout",
    "/api/v1/auth/register",
)


class RequestContextMiddleware:
    """
    Bind trace and request fields into structlog contextvars for one request.

    Honours an incoming X-Request-ID so traces can be joined across services.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        clear_contextvars()
        correlation_id = request.headers.get("X-Request-ID") or str(uuid4())
        bind_contextvars(
            correlation_id=correlation_id,
            **{
                "http.method": request.method,
                "http.url_details.path": request.path,
                "network.client.ip": get_client_ip(request),
            },
        )
        started = time.monotonic()
        try:
            response = self.get_response(request)
            logger.info(
                "request_finished",
                **{
                    "http.status_code": response.status_code,
                    "duration_ms": round((time.monotonic() - started) * 1000, 2),
                },
            )
            response["X-Request-ID"] = correlation_id
            return response
        finally:
            clear_contextvars()


class StytchAuthMiddleware:
    """
    Verify the bearer session JWT and attach request.auth.

    Every request gets a RequestAuth. Missing tokens leave it empty; rejected
    tokens set failed; an unreachable identity provider sets unavailable so
    endpoints report "temporarily unavailable" rather than "not logged in".
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.auth = RequestAuth()  # type: ignore[attr-defined]

        if not request.path.startswith(PUBLIC_PATH_PREFIXES):
            token = get_bearer_token(request)
            if token:
                request.auth = self._authenticate_jwt(request, token)  # type: ignore[attr-defined]

        return self.get_response(request)

    def _authenticate_jwt(self, request: HttpRequest, token: str) -> RequestAuth:
        from apps.accounts import identity
        from apps.accounts.services import get_or_create_user_from_identity

        try:
            identity_user = identity.verify(token)
            user = get_or_create_user_from_identity(identity_user)
        except AuthenticationRequired:
            logger.info("session_rejected")
            return RequestAuth(failed=True)
        except UpstreamUnavailable as e:
            return RequestAuth(unavailable=True, timed_out=e.timed_out)

        bind_contextvars(**{"usr.id": str(user.pk)})
        return RequestAuth(user=user)
