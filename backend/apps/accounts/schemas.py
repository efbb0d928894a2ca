"""
Auth API schemas - Pydantic models for request/response.
"""

from pydantic import BaseModel, EmailStr, Field

from apps.accounts.models import User

# --- Request Schemas ---


class RegisterRequest(BaseModel):
    """Create an account with email and password."""

    email: EmailStr = Field(..., examples=["evangelist@example.com"])
    password: str = Field(..., min_length=1, description="Checked for strength by the identity provider")
    name: str = Field(..., min_length=1, max_length=255, examples=["Mary Wanjiku"])
    phone: str = Field("", max_length=32, examples=["+254700000000"])


class LoginRequest(BaseModel):
    """Sign in with email and password."""

    email: EmailStr = Field(..., examples=["evangelist@example.com"])
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    """Request to update the current user's profile. Omitted fields are unchanged."""

    name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=32)


# --- Response Schemas ---


class UserInfo(BaseModel):
    """User information."""

    id: int = Field(..., description="Local user ID")
    email: str
    name: str
    phone: str
    is_approved: bool = Field(..., description="Evangelist profile approved to record souls")

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            id=user.pk,
            email=user.email,
            name=user.name,
            phone=user.phone,
            is_approved=user.is_approved,
        )


class SessionResponse(BaseModel):
    """Session issued on register or login."""

    session_token: str = Field(..., description="Opaque Stytch session token")
    session_jwt: str = Field(
        ..., description="Session JWT. Send as 'Authorization: Bearer <session_jwt>'"
    )
    user: UserInfo


class MembershipInfo(BaseModel):
    """One of the user's church memberships."""

    organization_id: int
    organization_name: str
    branch_id: int | None
    branch_name: str | None
    role: str = Field(..., description="super_admin, pastor_admin, branch_admin or evangelist")
    status: str = Field(..., description="active, pending or disabled")


class MeResponse(BaseModel):
    """Current user, with the roles that decide what they can do."""

    user: UserInfo
    is_platform_admin: bool
    memberships: list[MembershipInfo]
