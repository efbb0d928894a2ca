"""
Access API endpoints.

Exposes the resolved AuthContext so clients can decide which screens to
offer. Every endpoint still enforces its own permission server-side.
"""

from django.http import HttpRequest
from ninja import Router

from apps.access.permissions import (
    can_approve,
    can_manage_organization,
    can_record,
    can_view_organization_reports,
    can_view_platform_reports,
    require_permission,
)
from apps.access.schemas import AccessResponse, GrantInfo, OrganizationPermissions
from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth, get_auth_context

router = Router(tags=["access"])
bearer_auth = BearerAuth()


@router.get(
    "/me",
    response={200: AccessResponse, 401: ErrorResponse, 503: ErrorResponse},
    auth=bearer_auth,
    operation_id="getMyAccess",
    summary="Get my roles and permissions",
)
def my_access(request: HttpRequest) -> AccessResponse:
    """Resolve the caller's roles. Fails with 503 rather than returning an empty context."""
    user, ctx = get_auth_context(request)
    # A degraded context would read as "no permissions"; report it instead
    require_permission(ctx, True)

    grants = sorted(ctx.grants, key=lambda g: (g.organization_id, g.role.precedence, g.branch_id or 0))
    return AccessResponse(
        user_id=user.pk,
        is_platform_admin=ctx.is_platform_admin,
        is_approved=ctx.is_approved,
        can_view_platform_reports=can_view_platform_reports(ctx),
        grants=[
            GrantInfo(organization_id=g.organization_id, branch_id=g.branch_id, role=g.role)
            for g in grants
        ],
        organizations=[
            OrganizationPermissions(
                organization_id=org_id,
                role=ctx.highest_org_role(org_id),
                can_manage_organization=can_manage_organization(ctx, org_id),
                can_record=can_record(ctx, org_id),
                can_approve=can_approve(ctx, org_id),
                can_view_reports=can_view_organization_reports(ctx, org_id),
            )
            for org_id in sorted(ctx.organization_ids)
        ],
    )
