"""
Resource Tracker - Registry of side effects applied to the host.

Each side effect (scratch video on disk, framebuffer cursor blink state)
is registered together with the action that reverses it at the moment it
is applied. Shutdown then walks the registry once, newest first.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List

from video_clock.core.logging_utils import get_module_logger

logger = get_module_logger("ResourceTracker")

UndoAction = Callable[[], None]


class ResourceKind(Enum):
    """Kinds of side effects the video clock applies."""
    TEMP_ARTIFACT = "temp_artifact"
    CURSOR_BLINK = "cursor_blink"


@dataclass
class UndoResult:
    """Outcome of one undo action."""
    kind: ResourceKind
    success: bool
    duration_ms: float
    error: str = ""


class ResourceTracker:
    """
    Holds the undo action for every side effect currently applied.

    Guarantees:
    - at most one undo action per kind
    - ``run_all_undo()`` runs actions in reverse registration order
    - a failing action is logged and does not block the others
    - the registry is cleared after the first run, so repeat calls are no-ops

    Usage:
        tracker = ResourceTracker()
        tracker.register(ResourceKind.TEMP_ARTIFACT, lambda: path.unlink(missing_ok=True))
        ...
        tracker.run_all_undo()
    """

    def __init__(self):
        self._undo: Dict[ResourceKind, UndoAction] = {}

    def register(self, kind: ResourceKind, undo_fn: UndoAction) -> bool:
        """
        Record the undo action for ``kind``.

        Returns:
            True if registered, False if ``kind`` already had an action
        """
        if kind in self._undo:
            logger.warning("Undo for %s already registered, ignoring duplicate", kind.value)
            return False

        self._undo[kind] = undo_fn
        logger.debug("Registered undo for %s", kind.value)
        return True

    def is_registered(self, kind: ResourceKind) -> bool:
        return kind in self._undo

    @property
    def kinds(self) -> List[ResourceKind]:
        """Registered kinds in registration order."""
        return list(self._undo)

    def __len__(self) -> int:
        return len(self._undo)

    def run_all_undo(self) -> List[UndoResult]:
        """Run every registered undo action, newest first, then clear the registry."""
        pending = list(self._undo.items())
        self._undo.clear()

        if not pending:
            logger.debug("Nothing to undo")
            return []

        logger.info("Undoing %d side effect(s)...", len(pending))
        results: List[UndoResult] = []

        for kind, undo_fn in reversed(pending):
            started = time.perf_counter()
            try:
                undo_fn()
            except Exception as e:
                duration_ms = (time.perf_counter() - started) * 1000
                logger.error("Undo for %s failed: %s", kind.value, e, exc_info=True)
                results.append(UndoResult(kind, False, duration_ms, str(e)))
                continue

            duration_ms = (time.perf_counter() - started) * 1000
            logger.debug("Undo for %s completed in %.1fms", kind.value, duration_ms)
            results.append(UndoResult(kind, True, duration_ms))

        return results


__all__ = ["ResourceKind", "ResourceTracker", "UndoAction", "UndoResult"]
