"""
Core schemas - shared Pydantic models for API responses.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str = Field(..., description="Human-readable error message")
    code: str | None = Field(None, description="Stable machine-readable error code")

    model_config = {
        "json_schema_extra": {
            "example": {"detail": "No seats left for this designation.", "code": "NO_SEATS_DESIGNATION"}
        }
    }
