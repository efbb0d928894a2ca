"""
Approval workflow.

Two state machines:

- AccessRequest: pending -> approved | rejected (terminal, exactly once)
- Evangelist profile approval: unapproved <-> approved (reversible, audited)

Transitions return a TransitionResult instead of raising for the
idempotent cases, so a retried or double-clicked action reports
"already applied" rather than failing or writing twice.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.access.context import AuthContext
from apps.access.models import Membership
from apps.access.permissions import can_approve, can_view_platform_reports, require_permission
from apps.access.roles import MembershipStatus, Role
from apps.access.services import upsert_membership
from apps.accounts.models import User
from apps.approvals.models import AccessRequest, ApprovalLogEntry
from apps.core.exceptions import Conflict, InvalidRequest, NotFound
from apps.core.logging import get_logger
from apps.core.upstream import store_call
from apps.organizations.models import Branch, Organization

logger = get_logger(__name__)

AUDIT_LOG_WARNING = "The change was saved, but the audit log entry could not be written."


class Outcome(StrEnum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    PARTIAL_SUCCESS = "partial_success"


@dataclass
class TransitionResult:
    """Result of a workflow transition."""

    outcome: Outcome
    access_request: AccessRequest | None = None
    evangelist: User | None = None
    warnings: list[str] = field(default_factory=list)


def _outcome_for(warnings: list[str]) -> Outcome:
    return Outcome.PARTIAL_SUCCESS if warnings else Outcome.APPLIED


def _get_request(request_id: int) -> AccessRequest:
    with store_call("get_access_request"):
        access_request = (
            AccessRequest.objects.select_related("organization", "branch", "user")
            .filter(pk=request_id)
            .first()
        )
    if access_request is None:
        raise NotFound("Access request not found.")
    return access_request


def _check_branch(organization_id: int, branch_id: int | None) -> None:
    if branch_id is None:
        return
    with store_call("check_branch"):
        exists = Branch.objects.filter(pk=branch_id, organization_id=organization_id).exists()
    if not exists:
        raise NotFound("Branch not found in this church.")


def _append_approval_log(evangelist_id: int, approved: bool, actor_id: int | None) -> list[str]:
    """
    Write one audit row inside a savepoint.

    A failure here never undoes the approval change itself; it is returned
    as a warning for the caller to surface.
    """
    try:
        with transaction.atomic():
            ApprovalLogEntry.objects.create(
                evangelist_id=evangelist_id,
                approved=approved,
                action_by_id=actor_id,
            )
    except DatabaseError as e:
        logger.warning(
            "approval_log_write_failed",
            evangelist_id=evangelist_id,
            approved=approved,
            error=str(e),
        )
        return [AUDIT_LOG_WARNING]
    return []


# --- Access requests ---


def submit_request(
    user: User,
    organization_id: int,
    branch_id: int | None = None,
    note: str = "",
) -> TransitionResult:
    """
    Ask to join a church. Self-service: the caller is the requesting user.

    A second submission while one is still pending returns the pending
    request. After a rejection a fresh request is always accepted.
    """
    with store_call("submit_request"):
        if not Organization.objects.filter(pk=organization_id).exists():
            raise NotFound("Church not found.")
    _check_branch(organization_id, branch_id)

    with store_call("submit_request"), transaction.atomic():
        existing = (
            AccessRequest.objects.select_for_update()
            .filter(user=user, organization_id=organization_id, status=AccessRequest.Status.PENDING)
            .first()
        )
        if existing is not None:
            logger.info("access_request_already_pending", request_id=existing.pk, user_id=user.pk)
            return TransitionResult(Outcome.ALREADY_APPLIED, access_request=existing)

        access_request = AccessRequest.objects.create(
            user=user,
            organization_id=organization_id,
            branch_id=branch_id,
            note=note.strip(),
        )

    logger.info(
        "access_request_submitted",
        request_id=access_request.pk,
        user_id=user.pk,
        organization_id=organization_id,
    )
    return TransitionResult(Outcome.APPLIED, access_request=access_request)


def approve_request(
    ctx: AuthContext,
    request_id: int,
    assigned_branch_id: int | None = None,
) -> TransitionResult:
    """
    Approve a pending request and make the requester an active evangelist.

    Claiming the request, upserting the membership and setting the approval
    flag commit together or not at all. The claim is a conditional update on
    status, so of two concurrent approvals only one applies; the other gets
    Conflict. Approving an already approved request is a no-op.

    Raises:
        NotFound: Unknown request or branch
        PermissionDenied: Caller cannot approve for this church
        Conflict: Request was rejected or claimed concurrently
    """
    access_request = _get_request(request_id)
    require_permission(
        ctx,
        can_approve(ctx, access_request.organization_id),
        "Only church admins can approve requests.",
    )

    if access_request.status == AccessRequest.Status.APPROVED:
        logger.info("access_request_already_approved", request_id=request_id)
        return TransitionResult(Outcome.ALREADY_APPLIED, access_request=access_request)
    if access_request.status == AccessRequest.Status.REJECTED:
        raise Conflict("This request was already rejected.")

    branch_id = assigned_branch_id or access_request.branch_id
    _check_branch(access_request.organization_id, branch_id)

    with store_call("approve_request"), transaction.atomic():
        claimed = AccessRequest.objects.filter(
            pk=access_request.pk, status=AccessRequest.Status.PENDING
        ).update(
            status=AccessRequest.Status.APPROVED,
            handled_by_id=ctx.user_id,
            handled_at=timezone.now(),
            branch_id=branch_id,
        )
        if not claimed:
            logger.warning("access_request_claim_lost", request_id=request_id)
            raise Conflict("This request is no longer pending.")

        upsert_membership(
            user_id=access_request.user_id,
            organization_id=access_request.organization_id,
            role=Role.EVANGELIST,
            status=MembershipStatus.ACTIVE,
            branch_id=branch_id,
        )
        User.objects.filter(pk=access_request.user_id).update(is_approved=True)
        warnings = _append_approval_log(access_request.user_id, True, ctx.user_id)

    access_request.refresh_from_db()
    logger.info(
        "access_request_approved",
        request_id=request_id,
        organization_id=access_request.organization_id,
        branch_id=branch_id,
        handled_by=ctx.user_id,
    )
    return TransitionResult(_outcome_for(warnings), access_request=access_request, warnings=warnings)


def reject_request(ctx: AuthContext, request_id: int) -> TransitionResult:
    """
    Reject a pending request. No membership changes.

    Raises:
        NotFound: Unknown request
        PermissionDenied: Caller cannot approve for this church
        Conflict: Request was approved, or claimed concurrently
    """
    access_request = _get_request(request_id)
    require_permission(
        ctx,
        can_approve(ctx, access_request.organization_id),
        "Only church admins can reject requests.",
    )

    if access_request.status == AccessRequest.Status.REJECTED:
        return TransitionResult(Outcome.ALREADY_APPLIED, access_request=access_request)
    if access_request.status == AccessRequest.Status.APPROVED:
        raise Conflict("This request was already approved.")

    with store_call("reject_request"):
        claimed = AccessRequest.objects.filter(
            pk=access_request.pk, status=AccessRequest.Status.PENDING
        ).update(
            status=AccessRequest.Status.REJECTED,
            handled_by_id=ctx.user_id,
            handled_at=timezone.now(),
        )
    if not claimed:
        raise Conflict("This request is no longer pending.")

    access_request.refresh_from_db()
    logger.info("access_request_rejected", request_id=request_id, handled_by=ctx.user_id)
    return TransitionResult(Outcome.APPLIED, access_request=access_request)


def list_requests(
    ctx: AuthContext,
    organization_id: int,
    status: AccessRequest.Status | None = None,
) -> list[AccessRequest]:
    """A church's access requests, newest first."""
    require_permission(ctx, can_approve(ctx, organization_id), "Only church admins can view requests.")
    queryset = AccessRequest.objects.select_related("user", "branch").filter(
        organization_id=organization_id
    )
    if status is not None:
        queryset = queryset.filter(status=status)
    with store_call("list_requests"):
        return list(queryset)


def list_my_requests(user: User) -> list[AccessRequest]:
    with store_call("list_my_requests"):
        return list(
            AccessRequest.objects.select_related("organization", "branch").filter(user=user)
        )


# --- Evangelist approval ---


def set_evangelist_approval(
    ctx: AuthContext,
    evangelist_user_id: int,
    approved: bool,
) -> TransitionResult:
    """
    Set or clear an evangelist's approval flag and audit the change.

    Allowed for platform admins, and for church admins of any church where
    the user holds an evangelist membership. Independent of access request
    history, so legacy users can be approved directly by a platform admin.
    Setting the value the flag already has writes nothing.

    Raises:
        NotFound: Unknown user
        PermissionDenied: Caller administers none of the user's churches
    """
    with store_call("set_evangelist_approval"):
        evangelist = User.objects.filter(pk=evangelist_user_id).first()
        if evangelist is None:
            raise NotFound("Evangelist not found.")
        organization_ids = set(
            Membership.objects.filter(user_id=evangelist_user_id, role=Role.EVANGELIST).values_list(
                "organization_id", flat=True
            )
        )

    allowed = ctx.is_platform_admin or any(can_approve(ctx, org_id) for org_id in organization_ids)
    require_permission(ctx, allowed, "You do not administer this evangelist's church.")

    if evangelist.is_approved == approved:
        return TransitionResult(Outcome.ALREADY_APPLIED, evangelist=evangelist)

    with store_call("set_evangelist_approval"):
        changed = User.objects.filter(pk=evangelist_user_id, is_approved=not approved).update(
            is_approved=approved
        )
    if not changed:
        evangelist.refresh_from_db()
        return TransitionResult(Outcome.ALREADY_APPLIED, evangelist=evangelist)

    warnings = _append_approval_log(evangelist_user_id, approved, ctx.user_id)
    evangelist.refresh_from_db()
    logger.info(
        "evangelist_approval_set",
        evangelist_id=evangelist_user_id,
        approved=approved,
        action_by=ctx.user_id,
    )
    return TransitionResult(_outcome_for(warnings), evangelist=evangelist, warnings=warnings)


def list_approval_log(ctx: AuthContext, start: date, end: date) -> list[ApprovalLogEntry]:
    """Approval audit trail for a whole-day UTC range, newest first."""
    require_permission(ctx, can_view_platform_reports(ctx), "Platform admins only.")
    if start > end:
        raise InvalidRequest("The start date must not be after the end date.")
    with store_call("list_approval_log"):
        return list(
            ApprovalLogEntry.objects.select_related("evangelist", "action_by").filter(
                action_at__date__gte=start, action_at__date__lte=end
            )
        )
