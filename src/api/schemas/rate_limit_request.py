"""Request schema for the rate limit API"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class RateLimitRequestSchema(BaseModel):
    tenant_id: str = Field(..., min_length=1)
    action_type: str = Field(..., min_length=1)
    limit: int = Field(..., gt=0, description="Maximum actions per window")
    window_hours: float = Field(default=1, gt=0, description="Window length in hours")
    metadata: Optional[Dict[str, Any]] = None
