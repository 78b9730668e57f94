"""
Persisted encoder (ffmpeg) path for SlideCast.

The configured path lives in a small JSON document under the SlideCast config
directory. Resolution order for the binary actually invoked is: the
``SLIDECAST_FFMPEG`` environment variable, then the persisted value, then the
platform default.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from slidecast.configs.config import config
from slidecast.core.errors import MediaIOError

CONFIG_FILE_NAME = "config.json"


class EncoderPathStore:
    """JSON-backed store for the configured encoder path."""

    def __init__(self, config_dir: Path | None = None) -> None:
        self._config_dir = config_dir

    @property
    def config_file(self) -> Path:
        base = self._config_dir if self._config_dir is not None else config.config_dir
        return base / CONFIG_FILE_NAME

    def _load(self) -> dict[str, Any]:
        path = self.config_file
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning(f"Could not read encoder config {path}: {e}")
            return {}
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning(f"Ignoring malformed encoder config at {path}")
            return {}
        return data if isinstance(data, dict) else {}

    def get_configured(self) -> str | None:
        value = self._load().get("path")
        if isinstance(value, str) and value.strip():
            return value
        return None

    def set_configured(self, path: str | None) -> None:
        data = self._load()
        data["path"] = path.strip() if isinstance(path, str) and path.strip() else None
        target = self.config_file
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            raise MediaIOError(f"failed to save encoder config {target}: {e}") from e
        logger.info(f"Encoder path set to {data['path']!r} in {target}")


encoder_store = EncoderPathStore()


def default_ffmpeg_binary() -> str:
    return "ffmpeg.exe" if os.name == "nt" else "ffmpeg"


def resolve_ffmpeg_path(store: EncoderPathStore | None = None) -> str:
    """Return the encoder binary to invoke."""
    override = os.getenv(config.ffmpeg_env_var)
    if override:
        return override
    configured = (store or encoder_store).get_configured()
    if configured:
        return configured
    return default_ffmpeg_binary()
