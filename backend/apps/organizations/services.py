"""
Organization services - churches, branches and the evangelist roster.
"""

from dataclasses import dataclass

from django.db import IntegrityError, transaction

from apps.access.context import AuthContext
from apps.access.models import Membership
from apps.access.permissions import (
    can_manage_organization,
    can_manage_sub_unit,
    can_view_platform_reports,
    require_permission,
)
from apps.access.roles import MembershipStatus, Role
from apps.access.services import upsert_membership
from apps.accounts.models import User
from apps.core.exceptions import Conflict, InvalidRequest, NotFound
from apps.core.logging import get_logger
from apps.core.upstream import store_call
from apps.core.utils import make_slug
from apps.organizations.models import Branch, Organization

logger = get_logger(__name__)


@dataclass
class EvangelistRow:
    """One evangelist membership on a church's roster."""

    user_id: int
    name: str
    email: str
    phone: str
    approved: bool
    organization_id: int
    branch_id: int | None
    status: str


def get_organization(organization_id: int) -> Organization:
    with store_call("get_organization"):
        organization = Organization.objects.filter(pk=organization_id).first()
    if organization is None:
        raise NotFound("Church not found.")
    return organization


def list_organizations() -> list[Organization]:
    """All churches, by name. Any signed-in user may list them for onboarding."""
    with store_call("list_organizations"):
        return list(Organization.objects.order_by("name"))


def list_branches(organization_id: int) -> list[Branch]:
    """A church's branches, by name."""
    get_organization(organization_id)
    with store_call("list_branches"):
        return list(Branch.objects.filter(organization_id=organization_id).order_by("name"))


def create_organization(
    ctx: AuthContext,
    name: str,
    slug: str | None = None,
    pastor_user_id: int | None = None,
) -> Organization:
    """
    Create a church. Platform admins only.

    When pastor_user_id is given, that user becomes the church's active
    pastor admin in the same transaction.

    Raises:
        InvalidRequest: Blank name
        NotFound: Unknown pastor user
        Conflict: Slug already taken
    """
    require_permission(ctx, can_view_platform_reports(ctx), "Only platform admins can create churches.")
    name = name.strip()
    slug = make_slug(name, slug)
    if not name or not slug:
        raise InvalidRequest("Church name is required.")

    with store_call("create_organization"):
        if pastor_user_id is not None and not User.objects.filter(pk=pastor_user_id).exists():
            raise NotFound("Pastor user not found.")
        try:
            with transaction.atomic():
                organization = Organization.objects.create(name=name, slug=slug)
                if pastor_user_id is not None:
                    upsert_membership(
                        user_id=pastor_user_id,
                        organization_id=organization.pk,
                        role=Role.PASTOR_ADMIN,
                        status=MembershipStatus.ACTIVE,
                    )
        except IntegrityError as e:
            raise Conflict(f"A church with slug '{slug}' already exists.") from e

    logger.info(
        "organization_created",
        organization_id=organization.pk,
        slug=slug,
        pastor_user_id=pastor_user_id,
        created_by=ctx.user_id,
    )
    return organization


def create_branch(
    ctx: AuthContext,
    organization_id: int,
    name: str,
    slug: str | None = None,
) -> Branch:
    """
    Add a branch to a church.

    Raises:
        NotFound: Unknown church
        PermissionDenied: Caller does not manage the church
        Conflict: Slug already used in this church
    """
    require_permission(
        ctx,
        can_manage_organization(ctx, organization_id),
        "Only church admins can create branches.",
    )
    organization = get_organization(organization_id)
    name = name.strip()
    slug = make_slug(name, slug)
    if not name or not slug:
        raise InvalidRequest("Branch name is required.")

    with store_call("create_branch"):
        try:
            with transaction.atomic():
                branch = Branch.objects.create(organization=organization, name=name, slug=slug)
        except IntegrityError as e:
            raise Conflict(f"This church already has a branch with slug '{slug}'.") from e

    logger.info("branch_created", organization_id=organization_id, branch_id=branch.pk, slug=slug)
    return branch


def list_evangelists(ctx: AuthContext, organization_id: int) -> list[EvangelistRow]:
    """
    The church's evangelist roster, unapproved first, then by name.

    Includes pending and disabled memberships so pastors can act on them.
    """
    require_permission(
        ctx,
        can_manage_organization(ctx, organization_id),
        "Only church admins can view the evangelist roster.",
    )
    with store_call("list_evangelists"):
        memberships = list(
            Membership.objects.select_related("user")
            .filter(organization_id=organization_id, role=Role.EVANGELIST)
            .order_by("user__is_approved", "user__name", "user__email")
        )
    return [
        EvangelistRow(
            user_id=m.user_id,
            name=m.user.name,
            email=m.user.email,
            phone=m.user.phone,
            approved=m.user.is_approved,
            organization_id=m.organization_id,
            branch_id=m.branch_id,
            status=m.status,
        )
        for m in memberships
    ]


def assign_branch(
    ctx: AuthContext,
    organization_id: int,
    user_id: int,
    branch_id: int,
) -> Membership:
    """
    Move an evangelist to a branch.

    A branch admin must manage both the evangelist's current branch and the
    target one (an unassigned evangelist can be claimed by any branch
    admin), and the membership keeps its status. A pastor also
    activates it.

    Raises:
        NotFound: Unknown branch, or the user is not an evangelist of the church
        PermissionDenied: Caller does not manage the current or target branch
    """
    require_permission(
        ctx,
        can_manage_sub_unit(ctx, organization_id, branch_id),
        "You do not manage this branch.",
    )
    with store_call("assign_branch"):
        if not Branch.objects.filter(pk=branch_id, organization_id=organization_id).exists():
            raise NotFound("Branch not found in this church.")
        current = Membership.objects.filter(
            user_id=user_id, organization_id=organization_id, role=Role.EVANGELIST
        ).first()
        if current is None:
            raise NotFound("This user is not an evangelist of this church.")

        require_permission(
            ctx,
            current.branch_id is None
            or can_manage_sub_unit(ctx, organization_id, current.branch_id),
            "You do not manage this evangelist's branch.",
        )
        status = (
            MembershipStatus.ACTIVE
            if can_manage_organization(ctx, organization_id)
            else current.status
        )
        membership = upsert_membership(
            user_id=user_id,
            organization_id=organization_id,
            role=Role.EVANGELIST,
            status=status,
            branch_id=branch_id,
        )

    logger.info(
        "evangelist_branch_assigned",
        organization_id=organization_id,
        user_id=user_id,
        branch_id=branch_id,
        assigned_by=ctx.user_id,
    )
    return membership
