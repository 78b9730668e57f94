"""
Pydantic model for a single slide start time.
"""

from pydantic import BaseModel, Field


class SlideTiming(BaseModel):
    """Absolute moment a slide becomes visible."""

    slide_index: int = Field(..., ge=0, description="0-based slide index")
    time_seconds: float = Field(
        ..., ge=0, allow_inf_nan=False, description="Start time in seconds"
    )
