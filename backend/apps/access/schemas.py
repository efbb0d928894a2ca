"""
Access API schemas.
"""

from pydantic import BaseModel, Field


class GrantInfo(BaseModel):
    organization_id: int
    branch_id: int | None
    role: str


class OrganizationPermissions(BaseModel):
    """What the user may do in one church."""

    organization_id: int
    role: str = Field(..., description="Most senior active role in the church")
    can_manage_organization: bool
    can_record: bool
    can_approve: bool
    can_view_reports: bool


class AccessResponse(BaseModel):
    """The caller's resolved roles and permissions."""

    user_id: int
    is_platform_admin: bool
    is_approved: bool
    can_view_platform_reports: bool
    grants: list[GrantInfo]
    organizations: list[OrganizationPermissions]
