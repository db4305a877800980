"""Framebuffer console cursor blink suppression."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from video_clock.core.logging_utils import get_module_logger
from video_clock.core.resource_tracker import ResourceKind, ResourceTracker

logger = get_module_logger("CursorBlink")

DISABLED_VALUE = b"0\n"


def _is_writable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.W_OK)


class CursorBlink:
    """Captures, zeroes and restores the fbcon ``cursor_blink`` attribute."""

    def __init__(self, attribute_path: Path):
        self.attribute_path = Path(attribute_path)
        self.original: Optional[bytes] = None

    def disable(self, tracker: ResourceTracker) -> bool:
        """Zero the attribute, registering the restore with ``tracker``.

        Returns False (after a warning) when the attribute is missing or not
        writable; nothing is registered in that case.
        """
        path = self.attribute_path
        if not _is_writable(path):
            logger.warning("Cannot write to '%s'. Cursor may blink. Run as root.", path)
            return False

        try:
            original = path.read_bytes()
            path.write_bytes(DISABLED_VALUE)
        except OSError as e:
            logger.warning("Could not disable cursor blink via '%s': %s", path, e)
            return False

        self.original = original
        tracker.register(ResourceKind.CURSOR_BLINK, self.restore)
        logger.info("Framebuffer cursor blinking disabled")
        return True

    def restore(self) -> None:
        if self.original is None:
            return
        path = self.attribute_path
        if not _is_writable(path):
            logger.warning("'%s' is no longer writable, cursor blink not restored", path)
            return

        logger.info("Restoring cursor blink state to '%s'", self.original.decode(errors="replace").strip())
        path.write_bytes(self.original)
        self.original = None


__all__ = ["CursorBlink", "DISABLED_VALUE"]
