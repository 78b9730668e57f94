"""
Operator-chosen inputs and phase/run enums for a composition session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from slidecast.configs.config import config
from slidecast.schemas.composition import OverlayMedia, OverlayPosition, QualityProfile


class PipelinePhase(str, Enum):
    SELECTING = "selecting"
    EDITING = "editing"
    RENDERING = "rendering"


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CompositionSession:
    """The minimum UI-bound fields needed to drive the pipeline."""

    document_path: str | None = None
    narration_path: str | None = None
    page_count: int | None = None
    output_dir: str | None = None
    output_name: str | None = None
    container_ext: str = field(default_factory=lambda: config.default_container)
    raw_output_path: str | None = None
    overlay_position: OverlayPosition = field(
        default_factory=lambda: OverlayPosition(config.overlay_position)
    )
    overlay_relative_width: float = field(
        default_factory=lambda: config.overlay_relative_width
    )
    overlay_media: OverlayMedia = field(
        default_factory=lambda: OverlayMedia(config.overlay_media)
    )
    quality: QualityProfile = field(
        default_factory=lambda: QualityProfile(config.quality_profile)
    )

    def missing_inputs(self) -> list[str]:
        missing = []
        if not self.document_path:
            missing.append("slide document")
        if not self.narration_path:
            missing.append("narration video")
        if self.page_count is None:
            missing.append("page count")
        return missing
