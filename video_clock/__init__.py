"""Looping video background with a live clock, rendered straight to a framebuffer."""

from __future__ import annotations

from importlib import metadata
from typing import Optional, Sequence

from .app.main import main, run as _run

try:
    __version__ = metadata.version("video-clock")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Convenience wrapper that runs the async entry point and returns the exit code."""
    return _run(list(argv) if argv is not None else None)


__all__ = ["__version__", "main", "run"]
