"""
Tests for core middleware.

Tests JWT verification, local user sync, error paths and request context.
"""

from dataclasses import dataclass, field
from unittest.mock import MagicMock, patch

import pytest
from django.http import HttpRequest, HttpResponse
from stytch.core.response_base import StytchError, StytchErrorDetails

from apps.accounts.models import User
from apps.core.exceptions import UpstreamUnavailable
from apps.core.middleware import RequestContextMiddleware, StytchAuthMiddleware


# Mock Stytch response classes
@dataclass
class MockEmail:
    email: str


@dataclass
class MockName:
    first_name: str
    last_name: str


@dataclass
class MockStytchUser:
    user_id: str
    emails: list[MockEmail] = field(default_factory=list)
    name: MockName | None = None


@dataclass
class MockSessionResponse:
    user: MockStytchUser


def make_request(path: str = "/api/v1/test", auth_header: str | None = None) -> HttpRequest:
    """Create a mock HttpRequest."""
    request = HttpRequest()
    request.path = path
    request.method = "GET"
    request.META = {}
    if auth_header:
        request.META["HTTP_AUTHORIZATION"] = auth_header
    return request


def make_get_response() -> MagicMock:
    """Create a mock get_response callable."""
    return MagicMock(return_value=HttpResponse())


def stytch_error(status_code: int, error_type: str) -> StytchError:
    return StytchError(
        StytchErrorDetails(
            status_code=status_code,
            request_id="test-request-id",
            error_type=error_type,
            error_message=error_type,
        )
    )


@pytest.fixture
def middleware():
    """Create middleware instance."""
    return StytchAuthMiddleware(make_get_response())


@pytest.mark.django_db
class TestPublicPaths:
    """Tests for public path handling."""

    @pytest.mark.parametrize(
        "path",
        ["/api/v1/health", "/admin/login/", "/api/v1/auth/login", "/api/v1/auth/logout"],
    )
    def test_public_path_skips_auth(self, middleware: StytchAuthMiddleware, path: str) -> None:
        """Public paths should not attempt JWT verification."""
        request = make_request(path, "Bearer test-jwt")

        with patch.object(middleware, "_authenticate_jwt") as mock_auth:
            middleware(request)
            mock_auth.assert_not_called()

    def test_non_public_path_attempts_auth(self, middleware: StytchAuthMiddleware) -> None:
        """Non-public paths with Bearer token should attempt auth."""
        request = make_request("/api/v1/souls/", "Bearer test-jwt")

        with patch.object(middleware, "_authenticate_jwt") as mock_auth:
            middleware(request)
            mock_auth.assert_called_once_with(request, "test-jwt")


@pytest.mark.django_db
class TestJWTAuthentication:
    """Tests for JWT verification flow."""

    def test_no_auth_header_leaves_auth_empty(self, middleware: StytchAuthMiddleware) -> None:
        request = make_request("/api/v1/test")
        middleware(request)

        assert request.auth.user is None
        assert not request.auth.failed
        assert not request.auth.unavailable

    @patch("apps.accounts.identity.get_stytch_client")
    def test_valid_jwt_with_existing_user(
        self,
        mock_get_client: MagicMock,
        middleware: StytchAuthMiddleware,
    ) -> None:
        """Valid JWT for a known user attaches that user."""
        user = User.objects.create(email="test@example.com", name="Test User", stytch_user_id="user-test-123")
        mock_client = MagicMock()
        mock_client.sessions.authenticate.return_value = MockSessionResponse(
            user=MockStytchUser(user_id="user-test-123", emails=[MockEmail("test@example.com")])
        )
        mock_get_client.return_value = mock_client

        request = make_request("/api/v1/test", "Bearer valid-jwt")
        middleware(request)

        assert request.auth.user == user
        mock_client.sessions.authenticate.assert_called_once_with(session_jwt="valid-jwt")

    @patch("apps.accounts.identity.get_stytch_client")
    def test_first_request_creates_local_user(
        self,
        mock_get_client: MagicMock,
        middleware: StytchAuthMiddleware,
    ) -> None:
        """A verified identity with no local user gets one, unapproved."""
        mock_client = MagicMock()
        mock_client.sessions.authenticate.return_value = MockSessionResponse(
            user=MockStytchUser(
                user_id="user-new-456",
                emails=[MockEmail("new@example.com")],
                name=MockName(first_name="New", last_name="User"),
            )
        )
        mock_get_client.return_value = mock_client

        request = make_request("/api/v1/test", "Bearer jwt1")
        middleware(request)
        middleware(make_request("/api/v1/test", "Bearer jwt2"))

        assert request.auth.user.email == "new@example.com"
        assert request.auth.user.name == "New User"
        assert request.auth.user.is_approved is False
        assert User.objects.filter(stytch_user_id="user-new-456").count() == 1

    @patch("apps.accounts.identity.get_stytch_client")
    def test_invalid_jwt_marks_failed(
        self,
        mock_get_client: MagicMock,
        middleware: StytchAuthMiddleware,
    ) -> None:
        """Invalid or expired JWT leaves no user and marks the attempt failed."""
        mock_client = MagicMock()
        mock_client.sessions.authenticate.side_effect = stytch_error(401, "invalid_jwt")
        mock_get_client.return_value = mock_client

        request = make_request("/api/v1/test", "Bearer invalid-jwt")
        middleware(request)

        assert request.auth.user is None
        assert request.auth.failed is True
        assert request.auth.unavailable is False

    @patch("apps.accounts.identity.get_stytch_client")
    def test_provider_outage_marks_unavailable(
        self,
        mock_get_client: MagicMock,
        middleware: StytchAuthMiddleware,
    ) -> None:
        """A 5xx from the provider is reported as unavailable, not as logged out."""
        mock_client = MagicMock()
        mock_client.sessions.authenticate.side_effect = stytch_error(503, "internal_server_error")
        mock_get_client.return_value = mock_client

        request = make_request("/api/v1/test", "Bearer jwt")
        middleware(request)

        assert request.auth.user is None
        assert request.auth.unavailable is True
        assert request.auth.timed_out is False

    def test_timeout_marks_timed_out(self, middleware: StytchAuthMiddleware) -> None:
        with patch(
            "apps.accounts.identity.verify",
            side_effect=UpstreamUnavailable("slow", timed_out=True),
        ):
            request = make_request("/api/v1/test", "Bearer jwt")
            middleware(request)

        assert request.auth.unavailable is True
        assert request.auth.timed_out is True


class TestRequestContextMiddleware:
    """Tests for RequestContextMiddleware."""

    def test_echoes_incoming_request_id(self) -> None:
        middleware = RequestContextMiddleware(make_get_response())
        request = make_request("/api/v1/health")
        request.META["HTTP_X_REQUEST_ID"] = "req-123"

        response = middleware(request)

        assert response["X-Request-ID"] == "req-123"

    def test_generates_request_id(self) -> None:
        middleware = RequestContextMiddleware(make_get_response())

        response = middleware(make_request("/api/v1/health"))

        assert response["X-Request-ID"]

    def test_context_cleared_after_request(self) -> None:
        """Request fields must not leak into the next request's logs."""
        from structlog.contextvars import get_contextvars

        middleware = RequestContextMiddleware(make_get_response())
        middleware(make_request("/api/v1/health"))

        assert get_contextvars() == {}
