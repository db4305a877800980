"""Centralized path constants for the video clock."""

from __future__ import annotations

import os
from pathlib import Path

# Configuration
_CONFIG_ENV = os.environ.get("VIDEO_CLOCK_CONFIG")
CONFIG_PATH = Path(_CONFIG_ENV).expanduser() if _CONFIG_ENV else Path("/etc/videoClock/videoClock.conf")

# Scratch space for the pre-scaled background
_TEMP_ENV = os.environ.get("VIDEO_CLOCK_TMPDIR")
TEMP_DIR = Path(_TEMP_ENV).expanduser() if _TEMP_ENV else Path("/tmp")
ARTIFACT_PREFIX = "videoclock_bg_"
ARTIFACT_SUFFIX = ".mp4"

# Framebuffer console attributes
CURSOR_BLINK_FILE = Path("/sys/class/graphics/fbcon/cursor_blink")
DEFAULT_FRAMEBUFFER = Path("/dev/fb0")


def artifact_path_for(pid: int, temp_dir: Path = TEMP_DIR) -> Path:
    """Return the scratch video path owned by process ``pid``."""
    return Path(temp_dir) / f"{ARTIFACT_PREFIX}{pid}{ARTIFACT_SUFFIX}"


__all__ = [
    "CONFIG_PATH",
    "TEMP_DIR",
    "ARTIFACT_PREFIX",
    "ARTIFACT_SUFFIX",
    "CURSOR_BLINK_FILE",
    "DEFAULT_FRAMEBUFFER",
    "artifact_path_for",
]
