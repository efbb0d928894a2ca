"""
Permission predicates over AuthContext.

Pure functions with no store access. Every predicate is false for a
degraded context.
"""

from apps.access.context import AuthContext
from apps.access.roles import ORGANIZATION_ADMIN_ROLES, Role
from apps.core.exceptions import PermissionDenied, UpstreamUnavailable
from apps.core.logging import get_logger

logger = get_logger(__name__)


def can_view_platform_reports(ctx: AuthContext) -> bool:
    return not ctx.degraded and ctx.is_platform_admin


def can_manage_organization(ctx: AuthContext, organization_id: int) -> bool:
    if ctx.degraded:
        return False
    return ctx.is_platform_admin or ctx.highest_org_role(organization_id) in ORGANIZATION_ADMIN_ROLES


def can_manage_sub_unit(ctx: AuthContext, organization_id: int, branch_id: int | None) -> bool:
    """
    Organization admins manage every branch. A branch admin manages the
    branches named on their branch_admin grants; a grant without a branch
    covers the whole church.
    """
    if can_manage_organization(ctx, organization_id):
        return True
    if ctx.degraded or ctx.highest_org_role(organization_id) != Role.BRANCH_ADMIN:
        return False
    return any(
        g.branch_id is None or g.branch_id == branch_id
        for g in ctx.grants_for(organization_id, Role.BRANCH_ADMIN)
    )


def can_record(ctx: AuthContext, organization_id: int) -> bool:
    if ctx.degraded:
        return False
    return ctx.highest_org_role(organization_id) == Role.EVANGELIST and ctx.is_approved


def can_approve(ctx: AuthContext, organization_id: int) -> bool:
    return can_manage_organization(ctx, organization_id)


def can_view_organization_reports(ctx: AuthContext, organization_id: int) -> bool:
    return can_manage_organization(ctx, organization_id)


def require_permission(ctx: AuthContext, allowed: bool, message: str = "Not permitted.") -> None:
    """
    Raise the right error for a failed check.

    Raises:
        UpstreamUnavailable: The context is degraded, so the answer is unknown
        PermissionDenied: The context was resolved and lacks the permission
    """
    if ctx.degraded:
        raise UpstreamUnavailable(
            "Could not load your permissions right now.", timed_out=ctx.timed_out
        )
    if not allowed:
        logger.info("permission_denied", user_id=ctx.user_id, detail=message)
        raise PermissionDenied(message)
