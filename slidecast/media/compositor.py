"""
Final picture-in-picture composition with ffmpeg.
"""

from __future__ import annotations

import asyncio
from collections import deque

from loguru import logger

from slidecast.configs.config import config
from slidecast.configs.encoder_store import resolve_ffmpeg_path
from slidecast.core.errors import CompositionError
from slidecast.schemas.composition import CompositionRequest

from .ffmpeg import (
    FfmpegArgs,
    apply_quality,
    build_compose_args,
    parse_progress_seconds,
)
from .interfaces import Compositor

# Lines of ffmpeg diagnostics kept for the error message
STDERR_TAIL_LINES = 20

PROGRESS_KEYS = frozenset(
    {
        "frame",
        "fps",
        "bitrate",
        "total_size",
        "out_time",
        "out_time_ms",
        "out_time_us",
        "dup_frames",
        "drop_frames",
        "speed",
        "progress",
    }
)


def build_request_args(request: CompositionRequest) -> FfmpegArgs:
    args = build_compose_args(
        request.primary_path,
        request.secondary_path,
        request.output_path,
        request.overlay_relative_width,
        request.overlay_position,
        request.overlay_media,
        fps=request.fps,
        width=request.output_width,
        height=request.output_height,
    )
    return apply_quality(args, request.quality)


class FfmpegCompositor(Compositor):
    """Runs ffmpeg with ``-progress`` reporting on stderr."""

    def __init__(self, ffmpeg_path: str | None = None, timeout: float | None = None):
        self._ffmpeg_path = ffmpeg_path
        self.timeout = timeout if timeout is not None else config.encode_timeout

    @property
    def ffmpeg_path(self) -> str:
        return self._ffmpeg_path or resolve_ffmpeg_path()

    async def compose(self, request: CompositionRequest) -> None:
        args = build_request_args(request)
        cmd = [self.ffmpeg_path, "-progress", "pipe:2", *args.args]
        logger.info(
            f"Composing {request.output_path} "
            f"({request.overlay_media.value} overlay, {request.quality.value})"
        )
        logger.debug(f"ffmpeg command: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CompositionError(f"could not run {self.ffmpeg_path}: {e}") from e

        tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        try:
            await asyncio.wait_for(
                self._drain(process, request.expected_duration_sec, tail),
                timeout=self.timeout,
            )
        except TimeoutError:
            process.kill()
            await process.wait()
            raise CompositionError(
                f"composition timed out after {self.timeout:.0f}s"
            ) from None

        if process.returncode != 0:
            detail = "; ".join(tail) if tail else "no diagnostics"
            raise CompositionError(
                f"ffmpeg failed with status {process.returncode}: {detail}"
            )
        logger.info(f"Composition finished: {request.output_path}")

    async def _drain(
        self,
        process: asyncio.subprocess.Process,
        expected_duration: float | None,
        tail: deque[str],
    ) -> None:
        assert process.stderr is not None
        last_reported = -1
        async for raw in process.stderr:
            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                continue
            position = parse_progress_seconds(line)
            if position is not None:
                if expected_duration:
                    ratio = position / expected_duration
                    percent = max(0, min(100, int(ratio * 100)))
                    if percent // 10 > last_reported // 10:
                        last_reported = percent
                        logger.info(f"Composition progress: {percent}%")
                continue
            if line.partition("=")[0] in PROGRESS_KEYS or line.startswith("stream_"):
                continue
            tail.append(line)
        await process.wait()
