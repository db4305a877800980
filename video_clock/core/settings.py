"""Typed, immutable settings built from the key-value configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from .config_manager import ConfigManager, get_config_manager
from .logging_utils import get_module_logger
from .paths import CURSOR_BLINK_FILE, DEFAULT_FRAMEBUFFER, TEMP_DIR

logger = get_module_logger("Settings")

DEFAULT_VIDEO_SOURCE = "/root/background.mp4"
DEFAULT_FONT_FILE = "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"
DEFAULT_TEXT_COLOR = "white"
DEFAULT_TEXT_BG_COLOR = "black@0.5"
DEFAULT_SMALL_FONT_SIZE = 30
DEFAULT_LARGE_FONT_SIZE = 90
DEFAULT_RESTART_DELAY = 1.0


class TimeFormat(Enum):
    """Clock styles; anything other than ``24h`` means 12-hour."""
    TWELVE_HOUR = "12h"
    TWENTY_FOUR_HOUR = "24h"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TimeFormat":
        if value == cls.TWENTY_FOUR_HOUR.value:
            return cls.TWENTY_FOUR_HOUR
        if value and value != cls.TWELVE_HOUR.value:
            logger.warning("Unknown TIME_FORMAT '%s', falling back to 12h", value)
        return cls.TWELVE_HOUR

    @property
    def strftime_text(self) -> str:
        """drawtext text with ':' escaped for the filter parser."""
        if self is TimeFormat.TWENTY_FOUR_HOUR:
            return r"%H\:%M\:%S"
        return r"%I\:%M\:%S %p"

    @property
    def description(self) -> str:
        if self is TimeFormat.TWENTY_FOUR_HOUR:
            return "24-hour"
        return "12-hour"


@dataclass(frozen=True)
class OverlayStyle:
    """Everything drawtext needs to render the overlays."""
    font_file: str
    text_color: str = DEFAULT_TEXT_COLOR
    text_bg_color: str = DEFAULT_TEXT_BG_COLOR
    small_font_size: int = DEFAULT_SMALL_FONT_SIZE
    large_font_size: int = DEFAULT_LARGE_FONT_SIZE
    time_format: TimeFormat = TimeFormat.TWELVE_HOUR


@dataclass(frozen=True)
class ClockSettings:
    video_source: Path
    font_file: Path
    framebuffer: Path
    text_color: str = DEFAULT_TEXT_COLOR
    text_bg_color: str = DEFAULT_TEXT_BG_COLOR
    small_font_size: int = DEFAULT_SMALL_FONT_SIZE
    large_font_size: int = DEFAULT_LARGE_FONT_SIZE
    time_format: TimeFormat = TimeFormat.TWELVE_HOUR

    temp_dir: Path = TEMP_DIR
    cursor_blink_file: Path = CURSOR_BLINK_FILE
    restart_delay: float = DEFAULT_RESTART_DELAY
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"
    cleanup_orphans: bool = True

    @property
    def overlay_style(self) -> OverlayStyle:
        return OverlayStyle(
            font_file=str(self.font_file),
            text_color=self.text_color,
            text_bg_color=self.text_bg_color,
            small_font_size=self.small_font_size,
            large_font_size=self.large_font_size,
            time_format=self.time_format,
        )

    @classmethod
    def from_config(
        cls,
        config: Dict[str, str],
        config_manager: Optional[ConfigManager] = None,
    ) -> "ClockSettings":
        cm = config_manager or get_config_manager()

        restart_delay = cm.get_float(config, "RESTART_DELAY", DEFAULT_RESTART_DELAY)
        if restart_delay < 0:
            logger.warning("RESTART_DELAY must not be negative, using %.1f", DEFAULT_RESTART_DELAY)
            restart_delay = DEFAULT_RESTART_DELAY

        return cls(
            video_source=Path(cm.get_str(config, "VIDEO_SOURCE", DEFAULT_VIDEO_SOURCE)),
            font_file=Path(cm.get_str(config, "FONT_FILE", DEFAULT_FONT_FILE)),
            framebuffer=Path(cm.get_str(config, "FRAMEBUFFER", str(DEFAULT_FRAMEBUFFER))),
            text_color=cm.get_str(config, "TEXT_COLOR", DEFAULT_TEXT_COLOR),
            text_bg_color=_box_color(cm.get_str(config, "TEXT_BG_COLOR", DEFAULT_TEXT_BG_COLOR)),
            small_font_size=_font_size(cm, config, "SMALL_FONT_SIZE", DEFAULT_SMALL_FONT_SIZE),
            large_font_size=_font_size(cm, config, "LARGE_FONT_SIZE", DEFAULT_LARGE_FONT_SIZE),
            time_format=TimeFormat.parse(config.get("TIME_FORMAT")),
            temp_dir=Path(cm.get_str(config, "TEMP_DIR", str(TEMP_DIR))),
            cursor_blink_file=Path(cm.get_str(config, "CURSOR_BLINK_FILE", str(CURSOR_BLINK_FILE))),
            restart_delay=restart_delay,
            ffmpeg_bin=cm.get_str(config, "FFMPEG_BIN", "ffmpeg"),
            ffprobe_bin=cm.get_str(config, "FFPROBE_BIN", "ffprobe"),
            cleanup_orphans=cm.get_bool(config, "CLEANUP_ORPHANS", default=True),
        )


def _font_size(cm: ConfigManager, config: Dict[str, str], key: str, default: int) -> int:
    size = cm.get_int(config, key, default)
    if size <= 0:
        logger.warning("%s must be a positive integer, using %d", key, default)
        return default
    return size


def _box_color(value: str) -> str:
    # color@opacity; opacity is optional and must lie in [0, 1]
    if "@" not in value:
        return value
    color, _, opacity = value.rpartition("@")
    try:
        alpha = float(opacity)
    except ValueError:
        alpha = -1.0
    if not color or not 0.0 <= alpha <= 1.0:
        logger.warning("Invalid TEXT_BG_COLOR '%s', using %s", value, DEFAULT_TEXT_BG_COLOR)
        return DEFAULT_TEXT_BG_COLOR
    return value


__all__ = [
    "ClockSettings",
    "OverlayStyle",
    "TimeFormat",
]
