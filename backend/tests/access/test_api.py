"""
Tests for access API endpoints.
"""

from unittest.mock import patch

import pytest
from django.db import OperationalError

from apps.access.roles import Role
from tests.access.factories import MembershipFactory
from tests.organizations.factories import OrganizationFactory


@pytest.mark.django_db
class TestMyAccess:
    """Tests for GET /access/me."""

    def test_most_senior_role_wins(self, auth_client) -> None:
        """A user both evangelist and pastor in one church is treated as pastor."""
        church = OrganizationFactory.create()
        membership = MembershipFactory.create(organization=church, role=Role.EVANGELIST)
        MembershipFactory.create(user=membership.user, organization=church, role=Role.PASTOR_ADMIN)

        response = auth_client(membership.user).get("/api/v1/access/me")

        assert response.status_code == 200
        [org] = response.json()["organizations"]
        assert org["role"] == "pastor_admin"
        assert org["can_approve"] is True
        assert org["can_record"] is False
        assert len(response.json()["grants"]) == 2

    def test_store_outage_is_unavailable(self, auth_client) -> None:
        """Permissions that could not be loaded are not reported as none."""
        membership = MembershipFactory.create()
        client = auth_client(membership.user)

        with patch(
            "apps.access.resolver.PlatformAdmin.objects.filter",
            side_effect=OperationalError("canceling statement due to statement timeout"),
        ):
            response = client.get("/api/v1/access/me")

        assert response.status_code == 503
        assert response.json()["reason"] == "timed_out"
        assert response["Retry-After"] == "1"
