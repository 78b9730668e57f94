"""
Collaborator interfaces consumed by the composition pipeline.

The orchestrator only talks to these abstractions; concrete implementations
backed by poppler, Pillow, moviepy and ffmpeg live alongside in this package.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from PIL import Image

from slidecast.schemas.composition import CompositionRequest


class PageCounter(ABC):
    """Reports how many pages a slide document has."""

    @abstractmethod
    async def count_pages(self, path: Path) -> int:
        """
        Count the pages of the document at ``path``.

        Raises:
            RasterizationError: If the document cannot be parsed
        """
        pass


class Rasterizer(ABC):
    """Renders a single document page to a pixel surface."""

    @abstractmethod
    async def rasterize_page(
        self, document: bytes, page_number: int, scale: float
    ) -> Image.Image:
        """
        Render one page.

        Args:
            document: Raw document bytes
            page_number: 1-based page number
            scale: Render scale relative to 72 DPI

        Raises:
            RasterizationError: On a corrupt or unsupported page
        """
        pass


class FrameStore(ABC):
    """Owns the working directory holding extracted frames."""

    @abstractmethod
    async def allocate_working_dir(self, prefix: str) -> Path:
        """Create a fresh working directory. Raises ``MediaIOError``."""
        pass

    @abstractmethod
    async def export_frame(
        self, working_dir: Path, slide_index: int, surface: Image.Image
    ) -> Path:
        """Write frame ``slide_index`` (0-based). Raises ``MediaIOError``."""
        pass


class DurationProber(ABC):
    """Measures the duration of a media file."""

    @abstractmethod
    async def probe_duration(self, path: Path) -> float:
        """Return the duration in seconds. Raises ``ProbeError``."""
        pass


class SlideVideoAssembler(ABC):
    """Turns the extracted frames into a slide video."""

    @abstractmethod
    async def assemble(
        self, working_dir: Path, durations: Sequence[float], output_path: Path
    ) -> None:
        """
        Build a video showing frame ``i`` for ``durations[i]`` seconds.

        Raises:
            EncodingError: If a frame is missing or encoding fails
        """
        pass


class Compositor(ABC):
    """Produces the final composited video."""

    @abstractmethod
    async def compose(self, request: CompositionRequest) -> None:
        """Compose ``request``. Raises ``CompositionError``."""
        pass
