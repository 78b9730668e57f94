"""
Pydantic models for slide timings and composition requests.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from slidecast.schemas.timing import SlideTiming
from slidecast.timing.validation import validate_timings

MIN_OVERLAY_WIDTH = 0.05
MAX_OVERLAY_WIDTH = 0.50


class OverlayPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


class OverlayMedia(str, Enum):
    """Which input is shrunk into the overlay.

    ``primary`` is the narration video, ``secondary`` the assembled slide video.
    """

    PRIMARY = "primary"
    SECONDARY = "secondary"


class QualityProfile(str, Enum):
    DRAFT = "draft"
    STANDARD = "standard"
    HIGH = "high"


class CompositionRequest(BaseModel):
    """Everything the final compositor needs for one output video."""

    primary_path: str = Field(..., description="Narration / talking-head video")
    secondary_path: str = Field(..., description="Assembled slide video")
    output_path: str = Field(..., description="Final output file")
    overlay_position: OverlayPosition = OverlayPosition.BOTTOM_RIGHT
    overlay_relative_width: float = Field(
        default=0.25, description="Overlay width as a fraction of the output width"
    )
    overlay_media: OverlayMedia = OverlayMedia.SECONDARY
    quality: QualityProfile = QualityProfile.STANDARD
    fps: int = Field(default=30, gt=0)
    output_width: int = Field(default=1920, gt=0)
    output_height: int = Field(default=1080, gt=0)
    expected_duration_sec: float | None = Field(
        default=None, description="Expected output duration, used for progress"
    )
    timings: list[SlideTiming] = Field(default_factory=list)

    @field_validator("overlay_relative_width")
    @classmethod
    def validate_overlay_width(cls, v: float) -> float:
        if not MIN_OVERLAY_WIDTH <= v <= MAX_OVERLAY_WIDTH:
            raise ValueError(
                f"overlay_relative_width must be within "
                f"[{MIN_OVERLAY_WIDTH}, {MAX_OVERLAY_WIDTH}], got {v}"
            )
        return v

    @field_validator("expected_duration_sec")
    @classmethod
    def validate_expected_duration(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            return None
        return v

    @model_validator(mode="after")
    def validate_request_timings(self) -> CompositionRequest:
        validate_timings(self.timings)
        return self
