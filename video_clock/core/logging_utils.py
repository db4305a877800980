"""Component-tagged loggers for the video clock.

Every record carries the component in brackets so interleaved output of
the probe, prescale and playback stages stays readable in one stream:

    2026-01-01 12:00:00 | INFO     | video_clock.DeviceProbe | [DeviceProbe] Detected screen resolution: 1920x1080
"""

from __future__ import annotations

import logging
from typing import Optional

NAMESPACE = "video_clock"


class StructuredLogger:
    """Formats the message eagerly and prefixes ``[component]``."""

    __slots__ = ("logger", "component")

    def __init__(self, logger: logging.Logger, component: str) -> None:
        self.logger = logger
        self.component = component

    def _emit(self, level: int, message: object, args: tuple, kwargs: dict) -> None:
        if not self.logger.isEnabledFor(level):
            return
        text = str(message) % args if args else str(message)
        self.logger.log(level, "[%s] %s", self.component, text, **kwargs)

    def debug(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.DEBUG, message, args, kwargs)

    def info(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.INFO, message, args, kwargs)

    def warning(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.WARNING, message, args, kwargs)

    def error(self, message: object, *args, **kwargs) -> None:
        self._emit(logging.ERROR, message, args, kwargs)


def get_module_logger(name: Optional[str] = None) -> StructuredLogger:
    """Logger ``video_clock.<name>`` tagged with the last dotted part of ``name``."""
    if not name or name == NAMESPACE:
        return StructuredLogger(logging.getLogger(NAMESPACE), "Core")
    qualified = name if name.startswith(NAMESPACE + ".") else f"{NAMESPACE}.{name}"
    return StructuredLogger(logging.getLogger(qualified), qualified.rsplit(".", 1)[-1])


__all__ = ["NAMESPACE", "StructuredLogger", "get_module_logger"]
