"""
ffmpeg command builders and duration probing.

The argument builders are pure so they can be inspected in tests; running the
encoder is left to the prober and compositor.
"""

from __future__ import annotations

import asyncio
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from slidecast.configs.config import config
from slidecast.configs.encoder_store import resolve_ffmpeg_path
from slidecast.core.errors import ProbeError
from slidecast.schemas.composition import (
    OverlayMedia,
    OverlayPosition,
    QualityProfile,
)

from .interfaces import DurationProber

OVERLAY_MARGIN = 16

_OVERLAY_OFFSETS = {
    OverlayPosition.TOP_LEFT: (f"{OVERLAY_MARGIN}", f"{OVERLAY_MARGIN}"),
    OverlayPosition.TOP_RIGHT: (f"W-w-{OVERLAY_MARGIN}", f"{OVERLAY_MARGIN}"),
    OverlayPosition.BOTTOM_LEFT: (f"{OVERLAY_MARGIN}", f"H-h-{OVERLAY_MARGIN}"),
    OverlayPosition.BOTTOM_RIGHT: (f"W-w-{OVERLAY_MARGIN}", f"H-h-{OVERLAY_MARGIN}"),
}

# (crf, preset)
_QUALITY_SETTINGS = {
    QualityProfile.DRAFT: (32, "veryfast"),
    QualityProfile.STANDARD: (26, "medium"),
    QualityProfile.HIGH: (20, "slow"),
}

_DURATION_RE = re.compile(r"Duration:\s*(\d+):(\d+):(\d+(?:\.\d+)?)")


@dataclass
class FfmpegArgs:
    args: list[str] = field(default_factory=list)

    def joined(self) -> str:
        return " ".join(self.args)


def overlay_offsets(position: OverlayPosition) -> tuple[str, str]:
    return _OVERLAY_OFFSETS[OverlayPosition(position)]


def quality_settings(quality: QualityProfile) -> tuple[int, str]:
    return _QUALITY_SETTINGS[QualityProfile(quality)]


def build_compose_args(
    primary_path: str,
    secondary_path: str,
    output_path: str,
    overlay_relative_width: float,
    position: OverlayPosition,
    overlay_media: OverlayMedia,
    fps: int = 30,
    width: int = 1920,
    height: int = 1080,
) -> FfmpegArgs:
    """
    Build picture-in-picture arguments.

    Input 0 is the primary (narration) video and supplies the audio track;
    input 1 is the secondary (slide) video. ``overlay_media`` picks which of the
    two is scaled down into the corner.
    """
    if OverlayMedia(overlay_media) == OverlayMedia.PRIMARY:
        background, foreground = "1:v", "0:v"
    else:
        background, foreground = "0:v", "1:v"

    ox, oy = overlay_offsets(position)
    overlay_width = max(2, round(width * overlay_relative_width))
    filter_graph = (
        f"[{foreground}]scale={overlay_width}:-2[ov];"
        f"[{background}]scale={width}:{height}:flags=bicubic[bg];"
        f"[bg][ov]overlay={ox}:{oy}:eval=init,fps={fps}[out]"
    )

    args = [
        "-y",
        "-hide_banner",
        "-loglevel",
        "warning",
        "-i",
        primary_path,
        "-i",
        secondary_path,
        "-filter_complex",
        filter_graph,
        "-map",
        "[out]",
        "-map",
        "0:a?",
        "-c:v",
        "libx264",
        "-pix_fmt",
        "yuv420p",
        "-r",
        str(fps),
        "-s",
        f"{width}x{height}",
        "-c:a",
        "aac",
        "-b:a",
        "192k",
        "-shortest",
        "-movflags",
        "+faststart",
        output_path,
    ]
    return FfmpegArgs(args)


def apply_quality(args: FfmpegArgs, quality: QualityProfile) -> FfmpegArgs:
    """Insert ``-crf``/``-preset`` for ``quality`` just before the output path."""
    crf, preset = quality_settings(quality)
    output = args.args.pop() if args.args else ""
    args.args.extend(["-crf", str(crf), "-preset", preset])
    args.args.append(output)
    return args


def parse_ffmpeg_duration(stderr: str) -> float | None:
    """Extract the ``Duration: HH:MM:SS.xx`` banner from ``ffmpeg -i`` output."""
    for line in stderr.splitlines():
        match = _DURATION_RE.search(line)
        if match:
            hours, minutes, seconds = match.groups()
            return int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    return None


def parse_progress_seconds(line: str) -> float | None:
    """Read the encoded position from a ``-progress`` line, if it carries one."""
    key, sep, value = line.strip().partition("=")
    if not sep:
        return None
    # out_time_ms is in microseconds as well, despite its name
    if key in ("out_time_us", "out_time_ms"):
        try:
            return int(value) / 1_000_000
        except ValueError:
            return None
    return None


class FfmpegDurationProber(DurationProber):
    """Probe durations by reading ``ffmpeg -i`` diagnostics."""

    def __init__(self, ffmpeg_path: str | None = None, timeout: float | None = None):
        self._ffmpeg_path = ffmpeg_path
        self.timeout = timeout if timeout is not None else config.probe_timeout

    @property
    def ffmpeg_path(self) -> str:
        return self._ffmpeg_path or resolve_ffmpeg_path()

    async def probe_duration(self, path: Path) -> float:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._probe_sync, Path(path))

    def _probe_sync(self, path: Path) -> float:
        if not path.exists():
            raise ProbeError(f"media file does not exist: {path}")
        try:
            # ffmpeg exits non-zero without an output file; only stderr matters
            result = subprocess.run(
                [self.ffmpeg_path, "-hide_banner", "-i", str(path)],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"probing {path} timed out") from e
        except OSError as e:
            raise ProbeError(f"could not run {self.ffmpeg_path}: {e}") from e

        duration = parse_ffmpeg_duration(result.stderr)
        if duration is None or duration <= 0:
            raise ProbeError(
                "failed to detect duration; ensure ffmpeg is accessible"
            )
        logger.debug(f"Probed {path}: {duration:.3f}s")
        return duration
