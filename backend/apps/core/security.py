"""
Core security - authentication classes and helpers for API endpoints.
"""

from typing import TYPE_CHECKING

from django.http import HttpRequest
from ninja.security import HttpBearer

from apps.core.auth import RequestAuth
from apps.core.exceptions import AuthenticationRequired

if TYPE_CHECKING:
    from apps.access.context import AuthContext
    from apps.accounts.models import User


class BearerAuth(HttpBearer):
    """
    Bearer token authentication for API endpoints.

    The JWT itself is verified by StytchAuthMiddleware, which stores a
    RequestAuth on the request. This class only gates the endpoint and
    documents the OpenAPI security scheme.
    """

    def authenticate(self, request: HttpRequest, token: str) -> RequestAuth | None:
        """
        Return the middleware's RequestAuth when a user was verified.

        Raises UpstreamUnavailable when the identity provider could not be
        reached, so the client sees "temporarily unavailable" rather than
        "not logged in". Returns None (401) otherwise.
        """
        auth = getattr(request, "auth", None)
        if not isinstance(auth, RequestAuth):
            return None
        if auth.unavailable:
            auth.require_user()
        return auth if auth.user is not None else None


def get_request_auth(request: HttpRequest) -> RequestAuth:
    """
    Get the RequestAuth populated by the middleware.

    Django Ninja replaces request.auth with the authenticator's return value,
    which for BearerAuth is the same RequestAuth instance.
    """
    auth = getattr(request, "auth", None)
    if not isinstance(auth, RequestAuth):
        raise AuthenticationRequired("Not logged in.")
    return auth


def get_auth_context(request: HttpRequest) -> tuple["User", "AuthContext"]:
    """
    Get the authenticated user and their AuthContext.

    The context is resolved at most once per request.
    """
    auth = get_request_auth(request)
    return auth.require_user(), auth.access()


def get_bearer_token(request: HttpRequest) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header."""
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header.removeprefix("Bearer ").strip() or None
