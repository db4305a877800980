"""
Video Clock Controller - Wires probe, prescale and playback together.

Startup order is fixed:
1. Preconditions: ffmpeg/ffprobe on PATH, font and video readable,
   framebuffer present. Nothing has been touched if these fail.
2. Time format
3. Framebuffer geometry probe
4. Cursor blink disabled (tracked)
5. Pre-scale to a scratch file (tracked as soon as it is named)
6. Playback until stopped

Every exit path after (1) goes through the shutdown coordinator, whose
single cleanup callback runs the resource tracker's undo.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from typing import Optional

from video_clock.core.cursor_blink import CursorBlink
from video_clock.core.device_probe import DeviceProbe
from video_clock.core.engine import MediaEngine
from video_clock.core.errors import (
    PreconditionError,
    PreprocessError,
    ProbeError,
    ShutdownRequested,
)
from video_clock.core.logging_utils import get_module_logger
from video_clock.core.orphan_cleanup import cleanup_orphaned_players, remove_stale_artifacts
from video_clock.core.playback_loop import PlaybackLoop
from video_clock.core.preprocessor import Preprocessor
from video_clock.core.resource_tracker import ResourceTracker
from video_clock.core.settings import ClockSettings
from video_clock.core.shutdown_coordinator import ShutdownCoordinator, get_shutdown_coordinator

logger = get_module_logger("VideoClockController")

EXIT_OK = 0
EXIT_FAILURE = 1


def check_preconditions(settings: ClockSettings) -> None:
    """Raise PreconditionError for the first missing command, file or device."""
    for command in (settings.ffmpeg_bin, settings.ffprobe_bin):
        if shutil.which(command) is None:
            raise PreconditionError(command, "Required command is not installed")

    font = settings.font_file
    if not font.is_file() or not os.access(font, os.R_OK):
        raise PreconditionError(str(font), "Font file not found or not readable")

    source = settings.video_source
    if not source.is_file() or not os.access(source, os.R_OK):
        raise PreconditionError(str(source), "Video source not found or not readable")

    if not settings.framebuffer.exists():
        raise PreconditionError(str(settings.framebuffer), "Framebuffer device not found")


class VideoClockController:

    def __init__(
        self,
        settings: ClockSettings,
        *,
        engine: Optional[MediaEngine] = None,
        tracker: Optional[ResourceTracker] = None,
        coordinator: Optional[ShutdownCoordinator] = None,
    ):
        self.settings = settings
        self.engine = engine or MediaEngine()
        self.tracker = tracker or ResourceTracker()
        self.coordinator = coordinator or get_shutdown_coordinator()

        self.probe = DeviceProbe(self.engine, ffprobe=settings.ffprobe_bin)
        self.cursor = CursorBlink(settings.cursor_blink_file)
        self.preprocessor = Preprocessor(
            self.engine,
            self.tracker,
            settings.framebuffer,
            ffmpeg=settings.ffmpeg_bin,
            temp_dir=settings.temp_dir,
        )
        self.playback = PlaybackLoop(
            self.engine,
            ffmpeg=settings.ffmpeg_bin,
            restart_delay=settings.restart_delay,
        )

        self.coordinator.register_cleanup(self._undo_side_effects)

    async def _undo_side_effects(self) -> None:
        self.tracker.run_all_undo()

    def _sweep_orphans(self) -> None:
        if not self.settings.cleanup_orphans:
            return
        try:
            cleanup_orphaned_players()
            remove_stale_artifacts(self.settings.temp_dir)
        except Exception as e:
            logger.warning("Orphan cleanup failed: %s", e)

    async def run(self) -> int:
        """Run the clock until stopped. Returns the process exit code."""
        try:
            check_preconditions(self.settings)
        except PreconditionError as e:
            logger.error("Error: %s", e)
            return EXIT_FAILURE

        exit_code = EXIT_OK
        reason = "normal exit"
        stop_event = self.coordinator.stop_event
        settings = self.settings
        style = settings.overlay_style

        try:
            logger.info("Using %s time format", style.time_format.description)

            await asyncio.to_thread(self._sweep_orphans)

            geometry = await self.probe.probe(settings.framebuffer, stop_event)

            self.cursor.disable(self.tracker)

            artifact = await self.preprocessor.prescale(
                settings.video_source, geometry, style, stop_event
            )

            logger.info("Starting video clock. Send SIGINT or SIGTERM to stop.")
            await self.playback.run(artifact, settings.framebuffer, style, stop_event)
            reason = self.coordinator.stop_source or "playback ended"

        except ShutdownRequested as e:
            logger.info("%s", e)
            reason = self.coordinator.stop_source or e.source
        except ProbeError as e:
            logger.error("Error: %s", e)
            exit_code = EXIT_FAILURE
            reason = "probe failure"
        except PreprocessError as e:
            logger.error("Error: %s", e)
            exit_code = EXIT_FAILURE
            reason = "preprocess failure"
        except asyncio.CancelledError:
            reason = "cancelled"
            raise
        except Exception:
            reason = "unexpected error"
            raise
        finally:
            await self.coordinator.initiate_shutdown(reason)

        return exit_code


__all__ = ["EXIT_FAILURE", "EXIT_OK", "VideoClockController", "check_preconditions"]
