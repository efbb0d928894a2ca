"""
Tests for auth API endpoints.

The identity provider is mocked at apps.accounts.identity; requests go
through the full middleware and Ninja stack.
"""

from unittest.mock import patch

import pytest

from apps.access.roles import MembershipStatus, Role
from apps.accounts.identity import IdentitySession
from apps.accounts.models import User
from apps.core.exceptions import AuthenticationRequired, Conflict, UpstreamUnavailable
from tests.access.factories import MembershipFactory, PlatformAdminFactory
from tests.organizations.factories import BranchFactory

from .factories import UserFactory

SESSION = IdentitySession(user_id="user-test-new", session_token="tok", session_jwt="jwt")


@pytest.mark.django_db
class TestRegister:
    """Tests for POST /auth/register."""

    @patch("apps.accounts.identity.sign_up", return_value=SESSION)
    def test_success(self, _sign_up, api_client) -> None:
        """Should create an unapproved user and return the session."""
        response = api_client.post(
            "/api/v1/auth/register",
            {"email": "mary@example.com", "password": "s3cure-Passw0rd", "name": " Mary "},
            content_type="application/json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["session_jwt"] == "jwt"
        assert data["user"]["name"] == "Mary"
        assert data["user"]["is_approved"] is False
        assert User.objects.filter(stytch_user_id="user-test-new").exists()

    @patch("apps.accounts.identity.sign_up", side_effect=Conflict("An account with this email already exists."))
    def test_duplicate_email(self, _sign_up, api_client) -> None:
        response = api_client.post(
            "/api/v1/auth/register",
            {"email": "mary@example.com", "password": "pw", "name": "Mary"},
            content_type="application/json",
        )

        assert response.status_code == 409
        assert response.json()["reason"] == "conflict"

    def test_invalid_email_rejected_by_schema(self, api_client) -> None:
        response = api_client.post(
            "/api/v1/auth/register",
            {"email": "not-an-email", "password": "pw", "name": "Mary"},
            content_type="application/json",
        )

        assert response.status_code == 422


@pytest.mark.django_db
class TestLogin:
    """Tests for POST /auth/login."""

    @patch("apps.accounts.identity.sign_in", return_value=SESSION)
    def test_success(self, _sign_in, api_client) -> None:
        UserFactory.create(email="mary@example.com", stytch_user_id="user-test-new")

        response = api_client.post(
            "/api/v1/auth/login",
            {"email": "mary@example.com", "password": "pw"},
            content_type="application/json",
        )

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "mary@example.com"

    @patch(
        "apps.accounts.identity.sign_in",
        side_effect=AuthenticationRequired("Invalid email or password."),
    )
    def test_bad_credentials(self, _sign_in, api_client) -> None:
        response = api_client.post(
            "/api/v1/auth/login",
            {"email": "mary@example.com", "password": "wrong"},
            content_type="application/json",
        )

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid email or password.", "reason": "not_authenticated"}

    @patch("apps.accounts.identity.sign_in", side_effect=UpstreamUnavailable(timed_out=True))
    def test_provider_timeout(self, _sign_in, api_client) -> None:
        """Should say 'try again' rather than 'wrong password'."""
        response = api_client.post(
            "/api/v1/auth/login",
            {"email": "mary@example.com", "password": "pw"},
            content_type="application/json",
        )

        assert response.status_code == 503
        assert response.json()["reason"] == "timed_out"
        assert response["Retry-After"] == "1"


@pytest.mark.django_db
class TestLogout:
    """Tests for POST /auth/logout."""

    @patch("apps.accounts.identity.sign_out")
    def test_revokes_bearer_session(self, mock_sign_out, api_client) -> None:
        response = api_client.post("/api/v1/auth/logout", HTTP_AUTHORIZATION="Bearer jwt-123")

        assert response.status_code == 200
        mock_sign_out.assert_called_once_with("jwt-123")

    @patch("apps.accounts.identity.sign_out")
    def test_missing_token(self, mock_sign_out, api_client) -> None:
        response = api_client.post("/api/v1/auth/logout")

        assert response.status_code == 200
        mock_sign_out.assert_not_called()


@pytest.mark.django_db
class TestGetCurrentUser:
    """Tests for GET /auth/me."""

    def test_returns_user_and_memberships(self, auth_client) -> None:
        branch = BranchFactory.create(name="Ruiru")
        membership = MembershipFactory.create(
            organization=branch.organization,
            branch=branch,
            role=Role.EVANGELIST,
            status=MembershipStatus.PENDING,
        )

        response = auth_client(membership.user).get("/api/v1/auth/me")

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == membership.user_id
        assert data["is_platform_admin"] is False
        assert data["memberships"] == [
            {
                "organization_id": branch.organization_id,
                "organization_name": branch.organization.name,
                "branch_id": branch.pk,
                "branch_name": "Ruiru",
                "role": "evangelist",
                "status": "pending",
            }
        ]

    def test_platform_admin_flag(self, auth_client) -> None:
        admin = PlatformAdminFactory.create()

        response = auth_client(admin.user).get("/api/v1/auth/me")

        assert response.json()["is_platform_admin"] is True

    def test_unauthenticated(self, api_client) -> None:
        response = api_client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["reason"] == "not_authenticated"

    def test_rejected_token(self, identity_sessions, api_client) -> None:
        response = api_client.get("/api/v1/auth/me", HTTP_AUTHORIZATION="Bearer expired")

        assert response.status_code == 401


@pytest.mark.django_db
class TestUpdateProfile:
    """Tests for PATCH /auth/me/profile."""

    def test_updates_name(self, auth_client) -> None:
        user = UserFactory.create(name="Old", phone="+254711111111")

        response = auth_client(user).patch(
            "/api/v1/auth/me/profile", {"name": "New"}, content_type="application/json"
        )

        assert response.status_code == 200
        assert response.json()["name"] == "New"
        assert response.json()["phone"] == "+254711111111"
