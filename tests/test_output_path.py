"""
Tests for output path resolution.
"""

import pytest

from slidecast.pipeline.helpers import (
    RENDER_STEPS,
    detect_separator,
    resolve_output_path,
    step_display_name,
)


@pytest.mark.parametrize(
    "directory,expected",
    [
        ("/home/ana/videos", "/home/ana/videos/talk.mp4"),
        ("/home/ana/videos/", "/home/ana/videos/talk.mp4"),
        ("C:\\Videos", "C:\\Videos\\talk.mp4"),
        ("C:\\Videos\\", "C:\\Videos\\talk.mp4"),
        ("C:/Videos\\2024", "C:/Videos\\2024/talk.mp4"),
        ("out", "out/talk.mp4"),
        ("/", "/talk.mp4"),
    ],
)
def test_directory_separator_convention(directory, expected):
    assert resolve_output_path(directory, "talk", "mp4") == expected


def test_extension_dot_is_optional():
    assert resolve_output_path("/out", "talk", ".mkv") == "/out/talk.mkv"


def test_extension_not_duplicated():
    assert resolve_output_path("/out", "talk.mp4", "mp4") == "/out/talk.mp4"
    assert resolve_output_path("/out", "talk.MP4", "mp4") == "/out/talk.MP4"


def test_missing_name_and_extension_use_defaults():
    assert resolve_output_path("/out", None, None) == "/out/output.mp4"
    assert resolve_output_path("/out", "  ", "", default_extension="mkv") == (
        "/out/output.mkv"
    )


def test_raw_path_without_directory():
    assert resolve_output_path(None, "talk", "mp4", "/tmp/final.mp4") == (
        "/tmp/final.mp4"
    )
    assert resolve_output_path("   ", "talk", "mp4", "final.mp4") == "final.mp4"


def test_default_name_as_last_resort():
    assert resolve_output_path(None, None, None) == "output.mp4"
    assert resolve_output_path("", "", "", "", default_name="x.mov") == "x.mov"


def test_detect_separator():
    assert detect_separator("D:\\work") == "\\"
    assert detect_separator("/work") == "/"
    assert detect_separator("work") == "/"


def test_step_display_names():
    assert RENDER_STEPS[0] == "probe_track"
    assert RENDER_STEPS[-1] == "compose_final"
    assert step_display_name("extract_frames") == "Extracting slide frames"
    assert step_display_name("unknown") == "unknown"
