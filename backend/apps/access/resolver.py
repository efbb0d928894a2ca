"""
Authorization resolver.

The single place that turns a user id into effective roles. Endpoints call
it (through RequestAuth.access()) instead of querying membership tables
themselves.
"""

from apps.access.context import AuthContext, Grant
from apps.access.models import Membership, PlatformAdmin
from apps.access.roles import MembershipStatus, Role
from apps.accounts.models import User
from apps.core.exceptions import UpstreamUnavailable
from apps.core.logging import get_logger
from apps.core.upstream import store_call

logger = get_logger(__name__)


def resolve(user_id: int) -> AuthContext:
    """
    Compute the AuthContext for an authenticated user.

    Read-only. Duplicate memberships collapse into one grant. A user with no
    memberships and no platform admin row gets an empty context, which
    grants nothing. Store failures return a degraded context instead of
    raising, so callers fail closed.
    """
    try:
        with store_call("resolve"):
            platform_admin = PlatformAdmin.objects.filter(user_id=user_id).exists()
            rows = Membership.objects.filter(
                user_id=user_id, status=MembershipStatus.ACTIVE
            ).values_list("organization_id", "branch_id", "role")
            grants = frozenset(
                Grant(organization_id=org_id, branch_id=branch_id, role=Role(role))
                for org_id, branch_id, role in rows
            )
            approved = (
                User.objects.filter(pk=user_id).values_list("is_approved", flat=True).first()
            )
    except UpstreamUnavailable as e:
        logger.warning("auth_context_degraded", user_id=user_id, timed_out=e.timed_out)
        return AuthContext.unavailable(user_id, timed_out=e.timed_out)

    return AuthContext(
        user_id=user_id,
        is_platform_admin=platform_admin,
        grants=grants,
        is_approved=bool(approved),
    )
