"""
Core schemas - shared Pydantic models for API responses.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str = Field(..., description="Human-readable error message")

    model_config = {
        "json_schema_extra": {
            "example": {"detail": "Your membership is still active for 12 more days."}
        }
    }


class PaginationMeta(BaseModel):
    """Pagination block attached to list responses."""

    total: int
    pages: int
    current_page: int
