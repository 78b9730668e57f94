"""
Configuration module for SlideCast (configs).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Config:
    def __init__(self) -> None:
        self._config_dir: Path | None = None

        # Output format
        self.ffmpeg_fps = int(os.getenv("FFMPEG_FPS", "30"))
        self.output_width = int(os.getenv("OUTPUT_WIDTH", "1920"))
        self.output_height = int(os.getenv("OUTPUT_HEIGHT", "1080"))
        self.default_container = os.getenv("DEFAULT_CONTAINER", "mp4").lstrip(".")
        self.default_output_name = os.getenv("DEFAULT_OUTPUT_NAME", "output.mp4")

        # Rasterization; rendering uses a higher scale than the interactive preview
        self.render_scale = float(os.getenv("RENDER_SCALE", "2.0"))
        self.preview_scale = float(os.getenv("PREVIEW_SCALE", "1.0"))
        self.pdftoppm_path = os.getenv("PDFTOPPM_PATH", "pdftoppm")

        # Timing
        self.fallback_tail_seconds = float(os.getenv("FALLBACK_TAIL_SECONDS", "5.0"))
        self.work_dir_prefix = os.getenv("WORK_DIR_PREFIX", "slidecast-frames")

        # Overlay defaults
        self.overlay_position = os.getenv("OVERLAY_POSITION", "bottom-right")
        self.overlay_relative_width = float(os.getenv("OVERLAY_RELATIVE_WIDTH", "0.25"))
        self.overlay_media = os.getenv("OVERLAY_MEDIA", "secondary")
        self.quality_profile = os.getenv("QUALITY_PROFILE", "standard")

        # Subprocess timeouts (seconds)
        self.rasterize_timeout = float(os.getenv("RASTERIZE_TIMEOUT", "60"))
        self.probe_timeout = float(os.getenv("PROBE_TIMEOUT", "30"))
        self.encode_timeout = float(os.getenv("ENCODE_TIMEOUT", "1800"))

        # Encoder binary override
        self.ffmpeg_env_var = "SLIDECAST_FFMPEG"

        # Logging / runtime
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_file = os.getenv("LOG_FILE")
        self.log_dir = os.getenv("LOG_DIR", "logs")

    @property
    def config_dir(self) -> Path:
        """Directory holding the persisted SlideCast settings."""
        if self._config_dir is None:
            override = os.getenv("SLIDECAST_CONFIG_DIR")
            if override:
                self._config_dir = Path(override).expanduser().resolve()
            else:
                self._config_dir = _platform_config_root() / "SlideCast"
        return self._config_dir

    @property
    def output_resolution(self) -> tuple[int, int]:
        return self.output_width, self.output_height


def _platform_config_root() -> Path:
    if os.name == "nt" and os.getenv("APPDATA"):
        return Path(os.environ["APPDATA"])
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


config = Config()
