"""Data Transfer Objects for Rate Limit Use Cases"""

from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class CheckRateLimitCommandDTO(BaseModel):
    """
    Command DTO for a rate limit check

    An allowed check also records the action.
    """

    tenant_id: str = Field(..., description="Tenant identifier")

    action_type: str = Field(
        ...,
        min_length=1,
        description="Rate-limited action (e.g., 'ai.generate', 'export.csv')"
    )

    limit: int = Field(..., gt=0, description="Maximum actions per window")

    window_hours: float = Field(..., gt=0, description="Sliding window length in hours")

    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Stored on the action log row when allowed"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "tenant_id": "tenant_xyz789",
                "action_type": "ai.generate",
                "limit": 100,
                "window_hours": 24
            }
        }


class RateLimitResponseDTO(BaseModel):
    """Outcome of a rate limit check"""

    allowed: bool
    used: int = Field(..., description="Actions counted in the window, including this one when allowed")
    remaining: int
    limit: int
    reset_at: datetime = Field(..., description="When the oldest counted action leaves the window")
