"""
Shared helpers for the render pipeline.
"""

from __future__ import annotations

from pathlib import PurePath

STEP_DISPLAY_NAMES = {
    "probe_track": "Probing narration track",
    "allocate_workspace": "Preparing working directory",
    "extract_frames": "Extracting slide frames",
    "derive_durations": "Deriving slide durations",
    "assemble_slides": "Assembling slide video",
    "resolve_output": "Resolving output path",
    "compose_final": "Composing final video",
}

RENDER_STEPS = list(STEP_DISPLAY_NAMES)

# Steps whose failure only degrades the run
SOFT_STEPS = frozenset({"probe_track"})


def step_display_name(step_name: str) -> str:
    return STEP_DISPLAY_NAMES.get(step_name, step_name)


def detect_separator(directory: str) -> str:
    """Backslash only for purely backslash-separated directories."""
    if "\\" in directory and "/" not in directory:
        return "\\"
    return "/"


def resolve_output_path(
    directory: str | None,
    base_name: str | None,
    extension: str | None,
    raw_output_path: str | None = None,
    default_name: str = "output.mp4",
    default_extension: str = "mp4",
) -> str:
    """
    Build the final output path.

    With a directory, join it with ``base_name`` and ``extension`` using the
    directory's own separator convention; paths may come from a different OS
    than the one running the pipeline. Otherwise fall back to the raw output
    path, then to ``default_name``.
    """
    if directory and directory.strip():
        directory = directory.strip()
        separator = detect_separator(directory)
        trimmed = directory.rstrip("/\\")
        ext = (extension or "").strip().lstrip(".") or default_extension
        name = (base_name or "").strip() or PurePath(default_name).stem
        if not name.lower().endswith(f".{ext.lower()}"):
            name = f"{name}.{ext}"
        return f"{trimmed}{separator}{name}"

    if raw_output_path and raw_output_path.strip():
        return raw_output_path.strip()
    return default_name
