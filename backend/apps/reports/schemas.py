"""
Reports API schemas.
"""

from datetime import date

from pydantic import BaseModel, Field


class LeaderboardEntry(BaseModel):
    rank: int
    evangelist_id: int
    evangelist: str
    souls_count: int


class LeaderboardResponse(BaseModel):
    """Souls per evangelist for a date range."""

    won_from: date
    won_to: date
    organization_id: int | None = Field(None, description="Church, or null for every church")
    entries: list[LeaderboardEntry]


class SummaryResponse(BaseModel):
    """Totals for a date range."""

    won_from: date
    won_to: date
    total_souls: int
    unique_evangelists: int
