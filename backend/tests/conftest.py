"""
Shared pytest fixtures for all tests.

This module provides common fixtures used across multiple test modules.
Individual test modules can override these fixtures if needed.

Factories
---------
Import factories directly from their modules:

    from tests.accounts.factories import UserFactory
    from tests.organizations.factories import OrganizationFactory, BranchFactory
    from tests.access.factories import MembershipFactory, PlatformAdminFactory
    from tests.approvals.factories import AccessRequestFactory
    from tests.souls.factories import SoulFactory

Example usage:

    @pytest.mark.django_db
    def test_something(auth_client):
        membership = MembershipFactory.create(role=Role.PASTOR_ADMIN)
        client = auth_client(membership.user)
        response = client.get("/api/v1/auth/me")
"""

from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import patch

import pytest
from django.test import Client, RequestFactory

from apps.access.context import AuthContext, Grant
from apps.access.roles import Role
from apps.accounts.identity import IdentityUser
from apps.core.exceptions import AuthenticationRequired


@pytest.fixture
def request_factory() -> RequestFactory:
    """
    Django request factory for unit testing middleware and helpers.

    Example:
        def test_helper(request_factory):
            request = request_factory.get("/api/v1/endpoint")
    """
    return RequestFactory()


@pytest.fixture
def api_client() -> Client:
    """
    Django test client for full HTTP request/response cycle tests.

    Example:
        def test_api_returns_200(api_client):
            response = api_client.get("/api/v1/health")
            assert response.status_code == 200
    """
    return Client()


@pytest.fixture
def identity_sessions() -> Iterator[dict[str, Any]]:
    """
    Fake identity provider sessions.

    Maps bearer token -> User. identity.verify is patched to look tokens up
    here, so no request ever reaches Stytch. Unknown tokens are rejected.
    """
    sessions: dict[str, Any] = {}

    def _verify(session_jwt: str) -> IdentityUser:
        user = sessions.get(session_jwt)
        if user is None:
            raise AuthenticationRequired("Session expired or invalid.")
        return IdentityUser(user_id=user.stytch_user_id, email=user.email, name=user.name)

    with patch("apps.accounts.identity.verify", side_effect=_verify):
        yield sessions


@pytest.fixture
def auth_client(identity_sessions: dict[str, Any]) -> Callable[[Any], Client]:
    """
    Factory fixture for test clients signed in as a given user.

    Example:
        def test_me(auth_client):
            client = auth_client(UserFactory.create())
            assert client.get("/api/v1/auth/me").status_code == 200
    """

    def _client_for(user: Any) -> Client:
        token = f"session-jwt-{user.pk}"
        identity_sessions[token] = user
        return Client(HTTP_AUTHORIZATION=f"Bearer {token}")

    return _client_for


def make_context(
    user_id: int = 1,
    grants: list[tuple[int, int | None, Role]] | None = None,
    is_platform_admin: bool = False,
    is_approved: bool = False,
) -> AuthContext:
    """
    Build an AuthContext directly, for predicate tests that need no database.

    Example:
        ctx = make_context(grants=[(1, None, Role.PASTOR_ADMIN)])
    """
    return AuthContext(
        user_id=user_id,
        is_platform_admin=is_platform_admin,
        grants=frozenset(
            Grant(organization_id=org_id, branch_id=branch_id, role=role)
            for org_id, branch_id, role in grants or []
        ),
        is_approved=is_approved,
    )
