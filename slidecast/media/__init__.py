"""
Media package for SlideCast.

Concrete collaborators used by the composition pipeline: PDF rasterization,
frame export, duration probing, slide video assembly and final composition.
"""

from .assembler import MoviepySlideAssembler
from .compositor import FfmpegCompositor
from .ffmpeg import FfmpegDurationProber
from .pdf import PdfDocument
from .workspace import FrameWorkspace

__all__ = [
    "FfmpegCompositor",
    "FfmpegDurationProber",
    "FrameWorkspace",
    "MoviepySlideAssembler",
    "PdfDocument",
]
