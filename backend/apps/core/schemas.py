"""
Core schemas - shared Pydantic models for API responses.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str = Field(..., description="Human-readable error message")
    reason: str = Field(
        ...,
        description="Reason class: invalid_request, not_authenticated, not_permitted, "
        "not_found, conflict, unavailable or timed_out",
    )

    model_config = {
        "json_schema_extra": {"example": {"detail": "Not logged in.", "reason": "not_authenticated"}}
    }


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str = Field(..., description="Human-readable status message")
