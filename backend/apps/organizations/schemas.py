"""
Organizations API schemas.
"""

from pydantic import BaseModel, Field

from apps.organizations.models import Branch, Organization
from apps.organizations.services import EvangelistRow

# --- Request Schemas ---


class CreateOrganizationRequest(BaseModel):
    """Create a church."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Grace Chapel"])
    slug: str | None = Field(
        None,
        max_length=255,
        description="URL-safe identifier. Derived from the name when omitted.",
        examples=["grace-chapel"],
    )
    pastor_user_id: int | None = Field(
        None, description="User to make the church's pastor admin"
    )


class CreateBranchRequest(BaseModel):
    """Create a branch within a church."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Ruiru"])
    slug: str | None = Field(None, max_length=255, examples=["ruiru"])


class AssignBranchRequest(BaseModel):
    """Place an evangelist in a branch."""

    branch_id: int


# --- Response Schemas ---


class OrganizationResponse(BaseModel):
    id: int
    name: str
    slug: str

    @classmethod
    def from_organization(cls, organization: Organization) -> "OrganizationResponse":
        return cls(id=organization.pk, name=organization.name, slug=organization.slug)


class BranchResponse(BaseModel):
    id: int
    organization_id: int
    name: str
    slug: str

    @classmethod
    def from_branch(cls, branch: Branch) -> "BranchResponse":
        return cls(
            id=branch.pk,
            organization_id=branch.organization_id,
            name=branch.name,
            slug=branch.slug,
        )


class EvangelistResponse(BaseModel):
    """An evangelist on a church's roster."""

    user_id: int
    name: str
    email: str
    phone: str
    approved: bool = Field(..., description="Profile approval flag")
    organization_id: int
    branch_id: int | None
    status: str = Field(..., description="Membership status: active, pending or disabled")

    @classmethod
    def from_row(cls, row: EvangelistRow) -> "EvangelistResponse":
        return cls(
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            approved=row.approved,
            organization_id=row.organization_id,
            branch_id=row.branch_id,
            status=row.status,
        )


class MembershipResponse(BaseModel):
    user_id: int
    organization_id: int
    branch_id: int | None
    role: str
    status: str
