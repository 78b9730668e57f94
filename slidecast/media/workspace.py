"""
Working directory allocation and frame export.

Frames are written as ``00000.png``, ``00001.png``, ... where the number is the
0-based slide index. The assembler relies on this contiguous naming.
"""

import asyncio
import tempfile
from pathlib import Path

from loguru import logger
from PIL import Image

from slidecast.core.errors import MediaIOError

from .interfaces import FrameStore


def frame_filename(slide_index: int) -> str:
    return f"{slide_index:05d}.png"


def frame_path(working_dir: Path, slide_index: int) -> Path:
    return Path(working_dir) / frame_filename(slide_index)


class FrameWorkspace(FrameStore):
    """Temporary-directory frame store writing PNG files with Pillow."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = base_dir

    async def allocate_working_dir(self, prefix: str) -> Path:
        try:
            if self.base_dir is not None:
                self.base_dir.mkdir(parents=True, exist_ok=True)
            path = tempfile.mkdtemp(
                prefix=f"{prefix}-",
                dir=str(self.base_dir) if self.base_dir is not None else None,
            )
        except OSError as e:
            raise MediaIOError(f"failed to create working directory: {e}") from e
        logger.info(f"Allocated working directory {path}")
        return Path(path)

    async def export_frame(
        self, working_dir: Path, slide_index: int, surface: Image.Image
    ) -> Path:
        if slide_index < 0:
            raise MediaIOError(f"slide index must be >= 0, got {slide_index}")
        target = frame_path(working_dir, slide_index)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._save, working_dir, target, surface)
        return target

    @staticmethod
    def _save(working_dir: Path, target: Path, surface: Image.Image) -> None:
        try:
            Path(working_dir).mkdir(parents=True, exist_ok=True)
            surface.save(target, format="PNG")
        except (OSError, ValueError) as e:
            raise MediaIOError(f"failed to write frame {target}: {e}") from e
