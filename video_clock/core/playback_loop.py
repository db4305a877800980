"""
Playback Loop - Keeps the clock on screen until asked to stop.

ffmpeg may exit on transient decode or device errors. Every exit, clean
or not, is followed by a fixed pause and a fresh, identical invocation.
There is no restart cap and no backoff growth.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Union

from video_clock.core.engine import MediaEngine
from video_clock.core.errors import EngineError, PlaybackFailure, ShutdownRequested
from video_clock.core.ffmpeg_commands import playback_command
from video_clock.core.logging_utils import get_module_logger
from video_clock.core.settings import OverlayStyle

logger = get_module_logger("PlaybackLoop")


class PlaybackLoop:

    def __init__(
        self,
        engine: MediaEngine,
        *,
        ffmpeg: str = "ffmpeg",
        restart_delay: float = 1.0,
    ):
        self.engine = engine
        self.ffmpeg = ffmpeg
        self.restart_delay = restart_delay
        self.restarts = 0

    async def run_once(
        self,
        artifact_path: Union[str, Path],
        device_path: Union[str, Path],
        style: OverlayStyle,
        stop_event: asyncio.Event,
    ) -> PlaybackFailure:
        """Run one playback invocation and describe how it ended."""
        argv = playback_command(self.ffmpeg, artifact_path, style, device_path)
        try:
            result = await self.engine.run(argv, stop_event, label="ffmpeg playback")
        except EngineError as e:
            return PlaybackFailure(None, e.reason)
        if result.ok:
            return PlaybackFailure(0, "ffmpeg exited unexpectedly with code 0")
        return PlaybackFailure(result.returncode)

    async def run(
        self,
        artifact_path: Union[str, Path],
        device_path: Union[str, Path],
        style: OverlayStyle,
        stop_event: asyncio.Event,
    ) -> None:
        """Play until ``stop_event`` is set; returns only then."""
        logger.info("Starting video clock on %s", device_path)

        while not stop_event.is_set():
            try:
                failure = await self.run_once(artifact_path, device_path, style, stop_event)
            except ShutdownRequested:
                break

            self.restarts += 1
            logger.warning(
                "%s; restart #%d in %.1fs",
                failure,
                self.restarts,
                self.restart_delay,
            )

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.restart_delay)
            except asyncio.TimeoutError:
                continue

        logger.info("Playback stopped after %d restart(s)", self.restarts)


__all__ = ["PlaybackLoop"]
