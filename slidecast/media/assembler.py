"""
Slide video assembly for SlideCast.

Shows each extracted frame for its derived duration and encodes the result as a
silent slide video with moviepy.
"""

import asyncio
import gc
import math
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loguru import logger
from moviepy import ImageClip, concatenate_videoclips
from PIL import Image, ImageOps

from slidecast.configs.config import config
from slidecast.core.errors import EncodingError

from .interfaces import SlideVideoAssembler
from .workspace import frame_path

# The slide video is re-encoded by the compositor, so favour speed here
SLIDE_VIDEO_PRESET = "veryfast"

FITTED_DIR_NAME = "fitted"
LETTERBOX_COLOR = (0, 0, 0)


def even_dimensions(width: int, height: int) -> tuple[int, int]:
    """yuv420p needs both sides divisible by two."""
    return max(2, width - width % 2), max(2, height - height % 2)


def letterbox_frame(source: Path, target: Path, size: tuple[int, int]) -> Path:
    """Scale ``source`` to fit ``size`` and centre it on a black canvas."""
    with Image.open(source) as image:
        fitted = ImageOps.pad(
            image.convert("RGB"),
            size,
            method=Image.Resampling.LANCZOS,
            color=LETTERBOX_COLOR,
        )
    fitted.save(target, format="PNG")
    return target


class MoviepySlideAssembler(SlideVideoAssembler):
    """Assemble ``00000.png ...`` frames into a fixed-rate slide video."""

    def __init__(
        self,
        fps: int | None = None,
        resolution: tuple[int, int] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.fps = fps or config.ffmpeg_fps
        self.width, self.height = even_dimensions(
            *(resolution or config.output_resolution)
        )
        self.timeout = timeout if timeout is not None else config.encode_timeout

    def collect_frames(
        self, working_dir: Path, durations: Sequence[float]
    ) -> list[Path]:
        """Return frame paths for every duration, failing on the first gap."""
        if not durations:
            raise EncodingError("no slide durations to assemble")
        frames = []
        for index, duration in enumerate(durations):
            if not math.isfinite(duration) or duration <= 0:
                raise EncodingError(f"slide {index} has invalid duration {duration}")
            path = frame_path(working_dir, index)
            if not path.exists():
                raise EncodingError(f"missing slide image: {path}")
            frames.append(path)
        return frames

    def fit_frames(self, frames: Sequence[Path], working_dir: Path) -> list[Path]:
        """Letterbox every frame to exactly ``width`` x ``height``."""
        fitted_dir = Path(working_dir) / FITTED_DIR_NAME
        fitted_dir.mkdir(parents=True, exist_ok=True)
        size = (self.width, self.height)
        return [letterbox_frame(path, fitted_dir / path.name, size) for path in frames]

    async def assemble(
        self, working_dir: Path, durations: Sequence[float], output_path: Path
    ) -> None:
        working_dir = Path(working_dir)
        frames = self.collect_frames(working_dir, durations)
        durations = list(durations)
        output_path = Path(output_path)

        def _assemble_sync() -> None:
            clips: list[ImageClip] = []
            final_clip = None
            try:
                fitted = self.fit_frames(frames, working_dir)
                for image_path, duration in zip(fitted, durations):
                    clips.append(ImageClip(str(image_path), duration=duration))
                final_clip = concatenate_videoclips(clips, method="chain")
                output_path.parent.mkdir(parents=True, exist_ok=True)
                final_clip.write_videofile(
                    str(output_path),
                    fps=self.fps,
                    codec="libx264",
                    audio=False,
                    preset=SLIDE_VIDEO_PRESET,
                    threads=2,
                    ffmpeg_params=["-pix_fmt", "yuv420p"],
                    logger=None,
                )
            finally:
                for clip in clips:
                    clip.close()
                if final_clip is not None:
                    final_clip.close()
                gc.collect()

        logger.info(
            f"Assembling {len(frames)} slides ({sum(durations):.2f}s) "
            f"at {self.width}x{self.height} into {output_path}"
        )
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            await asyncio.wait_for(
                loop.run_in_executor(executor, _assemble_sync),
                timeout=self.timeout,
            )
        except TimeoutError:
            # Leave the encoder thread behind rather than block the loop on it
            executor.shutdown(wait=False, cancel_futures=True)
            raise EncodingError(
                f"slide video assembly timed out after {self.timeout:.0f}s"
            ) from None
        except Exception as e:
            executor.shutdown(wait=False)
            raise EncodingError(f"slide video assembly failed: {e}") from e
        else:
            executor.shutdown(wait=True)

        if not output_path.exists():
            raise EncodingError(f"assembler produced no video at {output_path}")
