"""One-time scaling of the background video to the framebuffer size."""

from __future__ import annotations

import asyncio
import os
import time
from pathlib import Path
from typing import Optional, Union

from video_clock.core.engine import MediaEngine
from video_clock.core.errors import EngineError, PreprocessError
from video_clock.core.ffmpeg_commands import prescale_command
from video_clock.core.logging_utils import get_module_logger
from video_clock.core.paths import TEMP_DIR, artifact_path_for
from video_clock.core.resource_tracker import ResourceKind, ResourceTracker
from video_clock.core.settings import OverlayStyle
from video_clock.core.types import Geometry

logger = get_module_logger("Preprocessor")


def allocate_artifact_path(temp_dir: Path = TEMP_DIR, pid: Optional[int] = None) -> Path:
    """Scratch path unique to this process, so parallel instances never share a file."""
    return artifact_path_for(os.getpid() if pid is None else pid, temp_dir)


class Preprocessor:
    """
    Produces the pre-scaled, audio-free background the playback loop reads.

    The scratch path is registered with the tracker before ffmpeg starts,
    so a partially written file is removed however the run ends.
    """

    def __init__(
        self,
        engine: MediaEngine,
        tracker: ResourceTracker,
        device_path: Union[str, Path],
        *,
        ffmpeg: str = "ffmpeg",
        temp_dir: Path = TEMP_DIR,
    ):
        self.engine = engine
        self.tracker = tracker
        self.device_path = Path(device_path)
        self.ffmpeg = ffmpeg
        self.temp_dir = Path(temp_dir)

    async def prescale(
        self,
        source_path: Union[str, Path],
        geometry: Geometry,
        style: OverlayStyle,
        stop_event: asyncio.Event,
    ) -> Path:
        artifact = allocate_artifact_path(self.temp_dir)
        self.tracker.register(ResourceKind.TEMP_ARTIFACT, lambda: _remove_artifact(artifact))

        logger.info("Pre-scaling video to %s. This may take a moment...", geometry)
        argv = prescale_command(self.ffmpeg, source_path, geometry, style, artifact, self.device_path)

        started = time.perf_counter()
        try:
            result = await self.engine.run(argv, stop_event, label="ffmpeg prescale")
        except EngineError as e:
            raise PreprocessError(source_path, e.reason) from e

        if not result.ok:
            raise PreprocessError(
                source_path,
                f"ffmpeg exited with code {result.returncode}",
                returncode=result.returncode,
            )

        logger.info(
            "Pre-scaling complete in %.1fs. Temporary file created at '%s'",
            time.perf_counter() - started,
            artifact,
        )
        return artifact


def _remove_artifact(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    logger.info("Removed temporary file '%s'", path)


__all__ = ["Preprocessor", "allocate_artifact_path"]
