"""
Shared fixtures for the SlideCast test suite.
"""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest


@pytest.fixture
def deck(tmp_path: Path) -> Path:
    """A slide document on disk; collaborators are faked so content is opaque."""
    path = tmp_path / "deck.pdf"
    path.write_bytes(b"%PDF-1.4 fake deck")
    return path


@pytest.fixture
def narration(tmp_path: Path) -> Path:
    path = tmp_path / "talk.mp4"
    path.write_bytes(b"fake video")
    return path


@pytest.fixture
def collaborators(tmp_path: Path) -> SimpleNamespace:
    """AsyncMock collaborators for a five-slide deck and a 100s narration."""
    working_dir = tmp_path / "work"

    page_counter = AsyncMock()
    page_counter.count_pages = AsyncMock(return_value=5)

    rasterizer = AsyncMock()
    rasterizer.rasterize_page = AsyncMock(return_value="surface")

    frame_store = AsyncMock()
    frame_store.allocate_working_dir = AsyncMock(return_value=working_dir)
    frame_store.export_frame = AsyncMock(
        side_effect=lambda directory, index, surface: directory / f"{index:05d}.png"
    )

    prober = AsyncMock()
    prober.probe_duration = AsyncMock(return_value=100.0)

    assembler = AsyncMock()
    assembler.assemble = AsyncMock()

    compositor = AsyncMock()
    compositor.compose = AsyncMock()

    return SimpleNamespace(
        working_dir=working_dir,
        page_counter=page_counter,
        rasterizer=rasterizer,
        frame_store=frame_store,
        prober=prober,
        assembler=assembler,
        compositor=compositor,
    )
