"""
Organizations API endpoints.

Churches and branches are readable by any signed-in user (onboarding needs
them). Creating churches is for platform admins; branches, the evangelist
roster and branch assignment are for church admins.
"""

from django.http import HttpRequest
from ninja import Router

from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth, get_auth_context, get_request_auth
from apps.organizations.schemas import (
    AssignBranchRequest,
    BranchResponse,
    CreateBranchRequest,
    CreateOrganizationRequest,
    EvangelistResponse,
    MembershipResponse,
    OrganizationResponse,
)
from apps.organizations.services import (
    assign_branch,
    create_branch,
    create_organization,
    list_branches,
    list_evangelists,
    list_organizations,
)

router = Router(tags=["organizations"])
bearer_auth = BearerAuth()


@router.get(
    "/",
    response={200: list[OrganizationResponse], 401: ErrorResponse},
    auth=bearer_auth,
    operation_id="listOrganizations",
    summary="List churches",
)
def organizations(request: HttpRequest) -> list[OrganizationResponse]:
    get_request_auth(request).require_user()
    return [OrganizationResponse.from_organization(o) for o in list_organizations()]


@router.post(
    "/",
    response={201: OrganizationResponse, 401: ErrorResponse, 403: ErrorResponse, 409: ErrorResponse},
    auth=bearer_auth,
    operation_id="createOrganization",
    summary="Create a church",
)
def create(request: HttpRequest, payload: CreateOrganizationRequest) -> tuple[int, OrganizationResponse]:
    """Create a church, optionally naming its pastor admin. Platform admins only."""
    _, ctx = get_auth_context(request)
    organization = create_organization(ctx, payload.name, payload.slug, payload.pastor_user_id)
    return 201, OrganizationResponse.from_organization(organization)


@router.get(
    "/{organization_id}/branches",
    response={200: list[BranchResponse], 401: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="listBranches",
    summary="List a church's branches",
)
def branches(request: HttpRequest, organization_id: int) -> list[BranchResponse]:
    get_request_auth(request).require_user()
    return [BranchResponse.from_branch(b) for b in list_branches(organization_id)]


@router.post(
    "/{organization_id}/branches",
    response={
        201: BranchResponse,
        401: ErrorResponse,
        403: ErrorResponse,
        404: ErrorResponse,
        409: ErrorResponse,
    },
    auth=bearer_auth,
    operation_id="createBranch",
    summary="Create a branch",
)
def add_branch(
    request: HttpRequest, organization_id: int, payload: CreateBranchRequest
) -> tuple[int, BranchResponse]:
    _, ctx = get_auth_context(request)
    branch = create_branch(ctx, organization_id, payload.name, payload.slug)
    return 201, BranchResponse.from_branch(branch)


@router.get(
    "/{organization_id}/evangelists",
    response={200: list[EvangelistResponse], 401: ErrorResponse, 403: ErrorResponse},
    auth=bearer_auth,
    operation_id="listEvangelists",
    summary="Evangelist roster",
)
def evangelists(request: HttpRequest, organization_id: int) -> list[EvangelistResponse]:
    """Evangelists of the church, unapproved first."""
    _, ctx = get_auth_context(request)
    return [EvangelistResponse.from_row(row) for row in list_evangelists(ctx, organization_id)]


@router.put(
    "/{organization_id}/evangelists/{user_id}/branch",
    response={200: MembershipResponse, 401: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="assignBranch",
    summary="Assign an evangelist to a branch",
)
def set_branch(
    request: HttpRequest, organization_id: int, user_id: int, payload: AssignBranchRequest
) -> MembershipResponse:
    _, ctx = get_auth_context(request)
    membership = assign_branch(ctx, organization_id, user_id, payload.branch_id)
    return MembershipResponse(
        user_id=membership.user_id,
        organization_id=membership.organization_id,
        branch_id=membership.branch_id,
        role=membership.role,
        status=membership.status,
    )
