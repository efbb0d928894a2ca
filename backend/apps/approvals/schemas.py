"""
Approvals API schemas.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from apps.approvals.models import AccessRequest, ApprovalLogEntry

OutcomeLiteral = Literal["applied", "already_applied", "partial_success"]


# --- Request Schemas ---


class SubmitAccessRequest(BaseModel):
    """Ask to join a church as an evangelist."""

    organization_id: int = Field(..., description="Church to join")
    branch_id: int | None = Field(None, description="Preferred branch, if known")
    note: str = Field("", max_length=1000, description="Optional note for the pastor")


class ApproveAccessRequest(BaseModel):
    """Approve a pending request, optionally placing the user in a branch."""

    branch_id: int | None = Field(
        None, description="Branch to assign. Defaults to the branch on the request."
    )


class SetApprovalRequest(BaseModel):
    """Set or clear an evangelist's profile approval."""

    approved: bool


# --- Response Schemas ---


class AccessRequestResponse(BaseModel):
    """An access request as shown in the pastor inbox and on onboarding."""

    id: int
    user_id: int
    user_name: str
    user_email: str
    organization_id: int
    organization_name: str
    branch_id: int | None
    branch_name: str | None
    note: str
    status: Literal["pending", "approved", "rejected"]
    created_at: datetime
    handled_by_id: int | None
    handled_at: datetime | None

    @classmethod
    def from_request(cls, access_request: AccessRequest) -> "AccessRequestResponse":
        return cls(
            id=access_request.pk,
            user_id=access_request.user_id,
            user_name=access_request.user.display_name,
            user_email=access_request.user.email,
            organization_id=access_request.organization_id,
            organization_name=access_request.organization.name,
            branch_id=access_request.branch_id,
            branch_name=access_request.branch.name if access_request.branch else None,
            note=access_request.note,
            status=access_request.status,
            created_at=access_request.created_at,
            handled_by_id=access_request.handled_by_id,
            handled_at=access_request.handled_at,
        )


class RequestTransitionResponse(BaseModel):
    """Outcome of submitting, approving or rejecting a request."""

    outcome: OutcomeLiteral = Field(
        ...,
        description="applied, already_applied (nothing changed), or partial_success "
        "(change saved, see warnings)",
    )
    request: AccessRequestResponse
    warnings: list[str] = Field(default_factory=list)


class EvangelistApprovalResponse(BaseModel):
    """Outcome of setting an evangelist's approval flag."""

    outcome: OutcomeLiteral
    user_id: int
    is_approved: bool
    warnings: list[str] = Field(default_factory=list)


class ApprovalLogEntryResponse(BaseModel):
    """One row of the approval audit trail."""

    id: int
    evangelist_id: int
    evangelist_name: str
    approved: bool
    action: Literal["APPROVED", "UNAPPROVED"]
    action_by_id: int | None
    action_by_name: str | None
    action_at: datetime

    @classmethod
    def from_entry(cls, entry: ApprovalLogEntry) -> "ApprovalLogEntryResponse":
        return cls(
            id=entry.pk,
            evangelist_id=entry.evangelist_id,
            evangelist_name=entry.evangelist.display_name,
            approved=entry.approved,
            action="APPROVED" if entry.approved else "UNAPPROVED",
            action_by_id=entry.action_by_id,
            action_by_name=entry.action_by.display_name if entry.action_by else None,
            action_at=entry.action_at,
        )
