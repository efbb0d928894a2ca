"""
Souls API schemas.
"""

from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field

from apps.souls.models import Soul


class SoulCreateRequest(BaseModel):
    """A soul to record for the calling evangelist."""

    organization_id: int | None = Field(
        None,
        description="Church the soul was won for. May be omitted when you record for exactly one church.",
    )
    name: str = Field(..., min_length=1, max_length=255, examples=["Mary Wanjiku"])
    phone: str = Field("", max_length=32, examples=["+254700000000"])
    email: EmailStr | None = Field(None, examples=["mary@example.com"])
    residence: str = Field("", max_length=255, examples=["Ruiru"])
    notes: str = Field("", description="Free-form follow-up notes")
    won_on: date | None = Field(None, description="Defaults to today")


class SoulFilterParams(BaseModel):
    """Query parameters for listing souls."""

    organization_id: int | None = None
    branch_id: int | None = None
    evangelist_id: int | None = None
    won_from: date | None = None
    won_to: date | None = None


class SoulResponse(BaseModel):
    """A recorded soul."""

    id: int
    evangelist_id: int
    evangelist_name: str
    organization_id: int
    branch_id: int | None
    name: str
    phone: str
    email: str
    residence: str
    notes: str
    won_on: date
    created_at: datetime

    @classmethod
    def from_soul(cls, soul: Soul) -> "SoulResponse":
        return cls(
            id=soul.pk,
            evangelist_id=soul.evangelist_id,
            evangelist_name=soul.evangelist.display_name,
            organization_id=soul.organization_id,
            branch_id=soul.branch_id,
            name=soul.name,
            phone=soul.phone,
            email=soul.email,
            residence=soul.residence,
            notes=soul.notes,
            won_on=soul.won_on,
            created_at=soul.created_at,
        )
