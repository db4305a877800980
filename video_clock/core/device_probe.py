"""Framebuffer geometry detection via ffprobe."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Union

from video_clock.core.engine import MediaEngine
from video_clock.core.errors import EngineError, ProbeError
from video_clock.core.ffmpeg_commands import probe_command
from video_clock.core.logging_utils import get_module_logger
from video_clock.core.types import Geometry

logger = get_module_logger("DeviceProbe")


def _first_value(text: str, key: str) -> Optional[str]:
    token = f"{key}="
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith(token):
            return stripped[len(token):].strip()
    return None


def parse_geometry(text: str, device_path: Union[str, Path] = "<framebuffer>") -> Geometry:
    """Extract ``width``/``height`` from ffprobe ``-show_streams`` output.

    The first ``width=`` and ``height=`` lines win, which selects the
    first video stream record.
    """
    width = _first_value(text, "width")
    if width is None:
        raise ProbeError(device_path, "no width= in ffprobe output")

    height = _first_value(text, "height")
    if not width or not height:
        raise ProbeError(device_path, "failed to parse resolution from ffprobe output")

    if not (width.isdigit() and height.isdigit()):
        raise ProbeError(device_path, f"non-numeric resolution {width!r}x{height!r}")

    try:
        return Geometry(int(width), int(height))
    except ValueError as e:
        raise ProbeError(device_path, str(e)) from e


class DeviceProbe:
    """Asks ffprobe for the current size of a framebuffer device."""

    def __init__(self, engine: MediaEngine, ffprobe: str = "ffprobe"):
        self.engine = engine
        self.ffprobe = ffprobe

    async def probe(self, device_path: Union[str, Path], stop_event: asyncio.Event) -> Geometry:
        argv = probe_command(self.ffprobe, device_path)
        try:
            result = await self.engine.run(argv, stop_event, capture_output=True, label="ffprobe")
        except EngineError as e:
            raise ProbeError(device_path, e.reason) from e

        # Exit status is ignored; only the reported geometry matters.
        geometry = parse_geometry(result.output, device_path)
        logger.info("Detected screen resolution: %s", geometry)
        return geometry


__all__ = ["DeviceProbe", "parse_geometry"]
