"""
Approvals API endpoints.

Handles the access request lifecycle and evangelist approval:
- Users submit and track requests to join a church
- Church admins review, approve and reject requests
- Admins set or clear an evangelist's approval flag
- Platform admins read the approval audit trail
"""

from datetime import date
from typing import Literal

from django.http import HttpRequest
from ninja import Router

from apps.approvals.schemas import (
    AccessRequestResponse,
    ApprovalLogEntryResponse,
    ApproveAccessRequest,
    EvangelistApprovalResponse,
    RequestTransitionResponse,
    SetApprovalRequest,
    SubmitAccessRequest,
)
from apps.approvals.services import (
    TransitionResult,
    approve_request,
    list_approval_log,
    list_my_requests,
    list_requests,
    reject_request,
    set_evangelist_approval,
    submit_request,
)
from apps.core.schemas import ErrorResponse
from apps.core.security import BearerAuth, get_auth_context, get_request_auth
from apps.core.utils import default_date_range

router = Router(tags=["approvals"])
bearer_auth = BearerAuth()

TRANSITION_ERRORS = {
    401: ErrorResponse,
    403: ErrorResponse,
    404: ErrorResponse,
    409: ErrorResponse,
    503: ErrorResponse,
}


def _transition_response(result: TransitionResult) -> RequestTransitionResponse:
    return RequestTransitionResponse(
        outcome=result.outcome,
        request=AccessRequestResponse.from_request(result.access_request),
        warnings=result.warnings,
    )


# --- Requester ---


@router.post(
    "/requests",
    response={200: RequestTransitionResponse, 401: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    operation_id="submitAccessRequest",
    summary="Request to join a church",
)
def submit(request: HttpRequest, payload: SubmitAccessRequest) -> RequestTransitionResponse:
    """
    Request evangelist access to a church.

    Returns the existing request with outcome already_applied if one is
    still pending for the same church.
    """
    user = get_request_auth(request).require_user()
    result = submit_request(user, payload.organization_id, payload.branch_id, payload.note)
    return _transition_response(result)


@router.get(
    "/requests/mine",
    response={200: list[AccessRequestResponse], 401: ErrorResponse},
    auth=bearer_auth,
    operation_id="listMyAccessRequests",
    summary="List my access requests",
)
def my_requests(request: HttpRequest) -> list[AccessRequestResponse]:
    """The caller's own requests, newest first."""
    user = get_request_auth(request).require_user()
    return [AccessRequestResponse.from_request(r) for r in list_my_requests(user)]


# --- Church admins ---


@router.get(
    "/organizations/{organization_id}/requests",
    response={200: list[AccessRequestResponse], 401: ErrorResponse, 403: ErrorResponse},
    auth=bearer_auth,
    operation_id="listAccessRequests",
    summary="List a church's access requests",
)
def organization_requests(
    request: HttpRequest,
    organization_id: int,
    status: Literal["pending", "approved", "rejected"] | None = None,
) -> list[AccessRequestResponse]:
    """Pastor inbox. Filter by status to show only pending requests."""
    _, ctx = get_auth_context(request)
    return [
        AccessRequestResponse.from_request(r) for r in list_requests(ctx, organization_id, status)
    ]


@router.post(
    "/requests/{request_id}/approve",
    response={200: RequestTransitionResponse, **TRANSITION_ERRORS},
    auth=bearer_auth,
    operation_id="approveAccessRequest",
    summary="Approve an access request",
)
def approve(
    request: HttpRequest, request_id: int, payload: ApproveAccessRequest
) -> RequestTransitionResponse:
    """
    Approve a pending request.

    The requester becomes an active evangelist of the church, in the given
    branch if one is supplied.
    """
    _, ctx = get_auth_context(request)
    return _transition_response(approve_request(ctx, request_id, payload.branch_id))


@router.post(
    "/requests/{request_id}/reject",
    response={200: RequestTransitionResponse, **TRANSITION_ERRORS},
    auth=bearer_auth,
    operation_id="rejectAccessRequest",
    summary="Reject an access request",
)
def reject(request: HttpRequest, request_id: int) -> RequestTransitionResponse:
    """Reject a pending request. The user may submit a new one later."""
    _, ctx = get_auth_context(request)
    return _transition_response(reject_request(ctx, request_id))


@router.put(
    "/evangelists/{user_id}/approval",
    response={200: EvangelistApprovalResponse, **TRANSITION_ERRORS},
    auth=bearer_auth,
    operation_id="setEvangelistApproval",
    summary="Approve or unapprove an evangelist",
)
def set_approval(
    request: HttpRequest, user_id: int, payload: SetApprovalRequest
) -> EvangelistApprovalResponse:
    """Set an evangelist's approval flag. Every change is written to the audit log."""
    _, ctx = get_auth_context(request)
    result = set_evangelist_approval(ctx, user_id, payload.approved)
    return EvangelistApprovalResponse(
        outcome=result.outcome,
        user_id=user_id,
        is_approved=result.evangelist.is_approved,
        warnings=result.warnings,
    )


# --- Platform admins ---


@router.get(
    "/log",
    response={200: list[ApprovalLogEntryResponse], 401: ErrorResponse, 403: ErrorResponse},
    auth=bearer_auth,
    operation_id="listApprovalLog",
    summary="Approval audit trail",
)
def approval_log(
    request: HttpRequest, start: date | None = None, end: date | None = None
) -> list[ApprovalLogEntryResponse]:
    """Approval changes in a date range. Defaults to the current month."""
    _, ctx = get_auth_context(request)
    start, end = default_date_range(start, end)
    return [ApprovalLogEntryResponse.from_entry(e) for e in list_approval_log(ctx, start, end)]
