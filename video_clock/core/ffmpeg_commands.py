"""
Argument builders for the three ways the clock drives ffmpeg.

    probe      ffprobe -f fbdev on the framebuffer, stream info for v:0
    prescale   scale the source once to the framebuffer size; while it runs,
               show a "Loading..." overlay on the framebuffer itself
    playback   loop the pre-scaled file forever with two strftime overlays

All builders return argv lists for ``create_subprocess_exec``; no shell is
involved, so only the filter-graph level needs escaping.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from .settings import OverlayStyle
from .types import Geometry

PathLike = Union[str, Path]

FB_PIXEL_FORMAT = "bgra"
LOADING_TEXT = "Loading..."
DATE_TEXT = "%A, %B %d, %Y %Z"

_CENTER_X = "(w-text_w)/2"
_CENTER_Y = "(h-text_h)/2"


def quote_filter_value(value: str) -> str:
    """Single-quote a filter option value (``'`` becomes ``'\\''``)."""
    return "'" + value.replace("'", r"'\''") + "'"


def drawtext(
    style: OverlayStyle,
    text: str,
    *,
    font_size: int,
    border: int,
    y: str,
    strftime: bool = False,
) -> str:
    options = []
    if strftime:
        options.append("expansion=strftime")
    options.extend([
        f"fontfile={quote_filter_value(style.font_file)}",
        f"text='{text}'",
        f"fontcolor={style.text_color}",
        "box=1",
        f"boxcolor={style.text_bg_color}",
        f"boxborderw={border}",
        f"fontsize={font_size}",
        f"x={_CENTER_X}",
        f"y={y}",
    ])
    return "drawtext=" + ":".join(options)


def probe_command(ffprobe: str, device_path: PathLike) -> List[str]:
    return [
        ffprobe,
        "-v", "error",
        "-f", "fbdev",
        "-i", str(device_path),
        "-show_streams",
        "-select_streams", "v:0",
    ]


def prescale_filter(geometry: Geometry, style: OverlayStyle) -> str:
    loading = drawtext(
        style,
        LOADING_TEXT,
        font_size=style.large_font_size,
        border=15,
        y=_CENTER_Y,
    )
    return f"scale={geometry.width}:{geometry.height},split[v1][i];[i]{loading}[v2]"


def prescale_command(
    ffmpeg: str,
    source_path: PathLike,
    geometry: Geometry,
    style: OverlayStyle,
    artifact_path: PathLike,
    device_path: PathLike,
) -> List[str]:
    return [
        ffmpeg,
        "-hide_banner",
        "-loglevel", "error",
        "-nostats",
        "-y",
        "-i", str(source_path),
        "-filter_complex", prescale_filter(geometry, style),
        # [v1]: audio-free copy sized for the framebuffer
        "-map", "[v1]",
        "-c:v", "libx264",
        "-preset", "ultrafast",
        "-an",
        str(artifact_path),
        # [v2]: placeholder shown while the transform runs
        "-map", "[v2]",
        "-pix_fmt", FB_PIXEL_FORMAT,
        "-f", "fbdev",
        str(device_path),
    ]


def playback_filter(style: OverlayStyle) -> str:
    date_line = drawtext(
        style,
        DATE_TEXT,
        font_size=style.small_font_size,
        border=10,
        y=f"(h/2)-text_h-({style.large_font_size}/2)-10",
        strftime=True,
    )
    time_line = drawtext(
        style,
        style.time_format.strftime_text,
        font_size=style.large_font_size,
        border=15,
        y=_CENTER_Y,
        strftime=True,
    )
    return f"{date_line},{time_line}"


def playback_command(
    ffmpeg: str,
    artifact_path: PathLike,
    style: OverlayStyle,
    device_path: PathLike,
) -> List[str]:
    return [
        ffmpeg,
        "-hide_banner",
        "-loglevel", "error",
        "-nostats",
        "-re",
        "-stream_loop", "-1",
        "-i", str(artifact_path),
        "-vf", playback_filter(style),
        "-pix_fmt", FB_PIXEL_FORMAT,
        "-f", "fbdev",
        str(device_path),
    ]


__all__ = [
    "DATE_TEXT",
    "FB_PIXEL_FORMAT",
    "LOADING_TEXT",
    "drawtext",
    "playback_command",
    "playback_filter",
    "prescale_command",
    "prescale_filter",
    "probe_command",
    "quote_filter_value",
]
