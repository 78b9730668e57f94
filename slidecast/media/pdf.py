"""
PDF page counting and rasterization for SlideCast.

Page counts come from PyPDF2; pages are rendered with poppler's ``pdftoppm``
and handed back as Pillow images.
"""

import asyncio
import subprocess
import tempfile
from pathlib import Path

import PyPDF2
from loguru import logger
from PIL import Image

from slidecast.configs.config import config
from slidecast.core.errors import RasterizationError

from .interfaces import PageCounter, Rasterizer

# PDF user space is 72 units per inch; scale 1.0 renders at that density
BASE_DPI = 72


def scale_to_dpi(scale: float) -> int:
    return max(1, round(BASE_DPI * scale))


class PdfDocument(PageCounter, Rasterizer):
    """PyPDF2 + pdftoppm backed page counter and rasterizer."""

    def __init__(
        self, pdftoppm_path: str | None = None, timeout: float | None = None
    ) -> None:
        self.pdftoppm_path = pdftoppm_path or config.pdftoppm_path
        self.timeout = timeout if timeout is not None else config.rasterize_timeout

    async def count_pages(self, path: Path) -> int:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._count_pages_sync, Path(path))

    def _count_pages_sync(self, path: Path) -> int:
        try:
            with open(path, "rb") as file:
                pdf_reader = PyPDF2.PdfReader(file)
                return len(pdf_reader.pages)
        except Exception as e:
            raise RasterizationError(f"failed to read pdf: {e}") from e

    async def rasterize_page(
        self, document: bytes, page_number: int, scale: float
    ) -> Image.Image:
        if page_number < 1:
            raise RasterizationError(f"page numbers start at 1, got {page_number}")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self._rasterize_sync, document, page_number, scale
        )

    def _rasterize_sync(
        self, document: bytes, page_number: int, scale: float
    ) -> Image.Image:
        with tempfile.TemporaryDirectory(prefix="slidecast-page-") as tmp:
            output_root = Path(tmp) / "page"
            cmd = [
                self.pdftoppm_path,
                "-png",
                "-r",
                str(scale_to_dpi(scale)),
                "-f",
                str(page_number),
                "-l",
                str(page_number),
                "-singlefile",
                "-",  # document on stdin
                str(output_root),
            ]
            try:
                result = subprocess.run(
                    cmd, input=document, capture_output=True, timeout=self.timeout
                )
            except subprocess.TimeoutExpired as e:
                raise RasterizationError(
                    f"rendering page {page_number} timed out after {self.timeout}s"
                ) from e
            except OSError as e:
                raise RasterizationError(
                    f"could not run {self.pdftoppm_path}: {e}"
                ) from e

            if result.returncode != 0:
                stderr = result.stderr.decode("utf-8", errors="replace").strip()
                raise RasterizationError(
                    f"failed to render page {page_number}: {stderr or result.returncode}"
                )

            generated = output_root.with_suffix(".png")
            if not generated.exists():
                raise RasterizationError(
                    f"pdftoppm produced no image for page {page_number}"
                )
            try:
                with Image.open(generated) as img:
                    img.load()
                    surface = img.copy()
            except OSError as e:
                raise RasterizationError(
                    f"unreadable image for page {page_number}: {e}"
                ) from e

        logger.debug(
            f"Rendered page {page_number} at {scale_to_dpi(scale)} DPI "
            f"({surface.width}x{surface.height})"
        )
        return surface
