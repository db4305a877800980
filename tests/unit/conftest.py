"""Unit test fixtures for isolated, fast test execution.

Every fixture here works inside ``tmp_path``: no real framebuffer,
sysfs attribute or ffmpeg binary is touched.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from tests.infrastructure.mocks.fake_engine import FakeEngine
from video_clock.core.resource_tracker import ResourceTracker
from video_clock.core.settings import ClockSettings, OverlayStyle, TimeFormat


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def tracker() -> ResourceTracker:
    return ResourceTracker()


@pytest.fixture
def stop_event() -> asyncio.Event:
    return asyncio.Event()


@pytest.fixture
def overlay_style() -> OverlayStyle:
    return OverlayStyle(
        font_file="/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
        text_color="white",
        text_bg_color="black@0.5",
        small_font_size=30,
        large_font_size=90,
        time_format=TimeFormat.TWELVE_HOUR,
    )


@pytest.fixture
def cursor_blink_file(tmp_path: Path) -> Path:
    """Stand-in for /sys/class/graphics/fbcon/cursor_blink."""
    path = tmp_path / "cursor_blink"
    path.write_bytes(b"1\n")
    return path


@pytest.fixture
def clock_env(tmp_path: Path, cursor_blink_file: Path, monkeypatch: pytest.MonkeyPatch) -> ClockSettings:
    """Settings whose files all exist under tmp_path and whose binaries resolve."""
    video = tmp_path / "background.mp4"
    video.write_bytes(b"\x00" * 16)
    font = tmp_path / "font.ttf"
    font.write_bytes(b"\x00" * 16)
    framebuffer = tmp_path / "fb0"
    framebuffer.write_bytes(b"")
    temp_dir = tmp_path / "scratch"
    temp_dir.mkdir()

    monkeypatch.setattr(
        "video_clock.core.controller.shutil.which",
        lambda name: f"/usr/bin/{name}",
    )

    return ClockSettings(
        video_source=video,
        font_file=font,
        framebuffer=framebuffer,
        temp_dir=temp_dir,
        cursor_blink_file=cursor_blink_file,
        restart_delay=0.01,
        cleanup_orphans=False,
    )
