"""
Record store - inserting and listing souls.
"""

from dataclasses import dataclass
from datetime import date

from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.access.context import AuthContext
from apps.access.permissions import can_record, require_permission
from apps.access.roles import ORGANIZATION_ADMIN_ROLES, Role
from apps.accounts.models import User
from apps.core.exceptions import InvalidRequest, UpstreamUnavailable
from apps.core.logging import get_logger
from apps.core.upstream import store_call
from apps.souls.models import Soul

logger = get_logger(__name__)


@dataclass
class SoulFields:
    """Contact fields of a new record."""

    name: str
    phone: str = ""
    email: str = ""
    residence: str = ""
    notes: str = ""
    won_on: date | None = None


@dataclass
class RecordFilter:
    """Filter for list_records. Unset fields do not narrow the result."""

    organization_id: int | None = None
    branch_id: int | None = None
    evangelist_id: int | None = None
    won_from: date | None = None
    won_to: date | None = None
    record_id: int | None = None


def _recording_organization(ctx: AuthContext, organization_id: int | None) -> int:
    if organization_id is not None:
        return organization_id
    candidates = ctx.organizations_with_role(Role.EVANGELIST)
    if len(candidates) != 1:
        raise InvalidRequest("Choose the church this soul was won for.")
    return next(iter(candidates))


def insert_record(
    ctx: AuthContext,
    user: User,
    organization_id: int | None,
    fields: SoulFields,
) -> Soul:
    """
    Store a soul for the calling evangelist.

    The branch comes from the evangelist's grant in the church. When no
    church is given and the evangelist records for exactly one, that one is
    used.

    Raises:
        InvalidRequest: No church given and more than one (or none) possible
        PermissionDenied: Not an approved, active evangelist of the church
    """
    organization_id = _recording_organization(ctx, organization_id)
    require_permission(
        ctx,
        can_record(ctx, organization_id),
        "Only approved evangelists of this church can record souls.",
    )
    if not fields.name.strip():
        raise InvalidRequest("Name is required.")

    grants = ctx.grants_for(organization_id, Role.EVANGELIST)
    branch_id = grants[0].branch_id if grants else None

    with store_call("insert_record"):
        soul = Soul.objects.create(
            evangelist=user,
            organization_id=organization_id,
            branch_id=branch_id,
            name=fields.name,
            phone=fields.phone,
            email=fields.email,
            residence=fields.residence,
            notes=fields.notes,
            won_on=fields.won_on or timezone.localdate(),
        )

    logger.info(
        "soul_recorded",
        soul_id=soul.pk,
        organization_id=organization_id,
        branch_id=branch_id,
    )
    return soul


def visible_records(ctx: AuthContext) -> "QuerySet[Soul]":
    """
    Souls the context may read.

    Evangelists see their own. Church admins see their church; branch admins
    see the branches on their grants (a grant without a branch covers the
    church). Platform admins see everything.
    """
    if ctx.degraded:
        raise UpstreamUnavailable("Could not load your permissions right now.", timed_out=ctx.timed_out)

    queryset = Soul.objects.select_related("evangelist", "organization", "branch")
    if ctx.is_platform_admin:
        return queryset

    scope = Q(evangelist_id=ctx.user_id)
    admin_orgs = ctx.organizations_with_role(*ORGANIZATION_ADMIN_ROLES)
    if admin_orgs:
        scope |= Q(organization_id__in=admin_orgs)
    for org_id in ctx.organizations_with_role(Role.BRANCH_ADMIN):
        for grant in ctx.grants_for(org_id, Role.BRANCH_ADMIN):
            if grant.branch_id is None:
                scope |= Q(organization_id=org_id)
            else:
                scope |= Q(organization_id=org_id, branch_id=grant.branch_id)
    return queryset.filter(scope)


def list_records(ctx: AuthContext, record_filter: RecordFilter) -> list[Soul]:
    """Visible souls matching the filter, newest first."""
    queryset = visible_records(ctx)
    if record_filter.record_id is not None:
        queryset = queryset.filter(pk=record_filter.record_id)
    if record_filter.organization_id is not None:
        queryset = queryset.filter(organization_id=record_filter.organization_id)
    if record_filter.branch_id is not None:
        queryset = queryset.filter(branch_id=record_filter.branch_id)
    if record_filter.evangelist_id is not None:
        queryset = queryset.filter(evangelist_id=record_filter.evangelist_id)
    if record_filter.won_from is not None:
        queryset = queryset.filter(won_on__gte=record_filter.won_from)
    if record_filter.won_to is not None:
        queryset = queryset.filter(won_on__lte=record_filter.won_to)

    with store_call("list_records"):
        return list(queryset.order_by("-won_on", "-created_at", "-id"))
