"""Exception hierarchy for the video clock."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class VideoClockError(RuntimeError):
    pass


class PreconditionError(VideoClockError):
    """A required command, file or device is missing before anything is touched."""

    def __init__(self, subject: str, reason: str):
        self.subject = subject
        self.reason = reason
        super().__init__(f"{reason}: '{subject}'")


class ProbeError(VideoClockError):
    def __init__(self, device_path: PathLike, reason: str):
        self.device_path = str(device_path)
        self.reason = reason
        super().__init__(f"Could not get resolution from framebuffer '{device_path}': {reason}")


class PreprocessError(VideoClockError):
    def __init__(self, source_path: PathLike, reason: str, returncode: Optional[int] = None):
        self.source_path = str(source_path)
        self.reason = reason
        self.returncode = returncode
        super().__init__(f"Failed to pre-scale '{source_path}': {reason}")


class PlaybackFailure(VideoClockError):
    """One playback run ended; the loop restarts it."""

    def __init__(self, returncode: Optional[int], reason: str = ""):
        self.returncode = returncode
        self.reason = reason or f"exit code {returncode}"
        super().__init__(f"Playback stopped: {self.reason}")


class EngineError(VideoClockError):
    """The media engine could not be launched at all."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Could not run '{command}': {reason}")


class ShutdownRequested(VideoClockError):
    """Stop was requested while waiting on the media engine."""

    def __init__(self, source: str = "stop request"):
        self.source = source
        super().__init__(f"Shutdown requested ({source})")


__all__ = [
    "VideoClockError",
    "PreconditionError",
    "ProbeError",
    "PreprocessError",
    "PlaybackFailure",
    "EngineError",
    "ShutdownRequested",
]
