"""
Shutdown Coordinator - Single point of control for stopping the clock.

Holds the stop event every blocking call races against, and runs the
registered cleanup callbacks exactly once no matter how many exit paths
(signal, failure, normal return) reach it.
"""

import asyncio
import inspect
import time
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from video_clock.core.logging_utils import get_module_logger

CleanupCallback = Callable[[], Union[None, Awaitable[None]]]


class ShutdownState(Enum):
    """States of the shutdown process."""
    RUNNING = "running"
    REQUESTED = "requested"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class ShutdownCoordinator:
    """
    Coordinates shutdown across all components.

    Shutdown sequence:
    1. A signal handler calls request_stop(); the stop event is set and
       every pending engine call terminates its child
    2. The controller unwinds and calls initiate_shutdown()
    3. Cleanup callbacks run once, in registration order
    4. State transitions to COMPLETE
    """

    def __init__(self):
        self.logger = get_module_logger("ShutdownCoordinator")
        self._state = ShutdownState.RUNNING
        self._stop_event = asyncio.Event()
        self._shutdown_event = asyncio.Event()
        self._cleanup_callbacks: list[CleanupCallback] = []
        self._lock = asyncio.Lock()
        self._stop_source: Optional[str] = None

    @property
    def state(self) -> ShutdownState:
        return self._state

    @property
    def stop_event(self) -> asyncio.Event:
        """Set once a stop has been requested."""
        return self._stop_event

    @property
    def stop_source(self) -> Optional[str]:
        return self._stop_source

    @property
    def is_stop_requested(self) -> bool:
        return self._stop_event.is_set()

    @property
    def is_complete(self) -> bool:
        return self._state == ShutdownState.COMPLETE

    def register_cleanup(self, callback: CleanupCallback) -> None:
        """
        Register a cleanup callback to be executed during shutdown.

        Callbacks may be plain functions or coroutine functions and are
        executed in the order they are registered.
        """
        self._cleanup_callbacks.append(callback)
        self.logger.debug("Registered cleanup callback: %s", _callback_name(callback))

    def request_stop(self, source: str = "unknown") -> None:
        """Ask everything to stop. Safe to call from a signal handler, repeatedly."""
        if self._stop_event.is_set():
            self.logger.debug("Stop already requested, ignoring request from %s", source)
            return
        self.logger.info("Stop requested by: %s", source)
        self._stop_source = source
        if self._state == ShutdownState.RUNNING:
            self._state = ShutdownState.REQUESTED
        self._stop_event.set()

    async def initiate_shutdown(self, source: str = "unknown") -> None:
        """
        Run the cleanup callbacks.

        This is the single entry point for cleanup. Calls after the first
        are no-ops.
        """
        shutdown_start = time.time()

        async with self._lock:
            if self._state in (ShutdownState.IN_PROGRESS, ShutdownState.COMPLETE):
                self.logger.debug("Shutdown already initiated (state=%s), ignoring request from %s",
                                  self._state.value, source)
                return
            self._state = ShutdownState.IN_PROGRESS

        self.logger.info("Cleaning up (triggered by: %s)...", source)
        if not self._stop_event.is_set():
            self._stop_source = source
            self._stop_event.set()

        await self._execute_cleanup()

        async with self._lock:
            self._state = ShutdownState.COMPLETE
            self._shutdown_event.set()

        self.logger.info("Cleanup complete in %.3fs", time.time() - shutdown_start)

    async def _execute_cleanup(self) -> None:
        for i, callback in enumerate(self._cleanup_callbacks, 1):
            name = _callback_name(callback)
            try:
                self.logger.debug("Starting cleanup %d/%d: %s", i, len(self._cleanup_callbacks), name)
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error("Error in cleanup callback %s: %s", name, e, exc_info=True)

    async def wait_for_shutdown(self) -> None:
        await self._shutdown_event.wait()


def _callback_name(callback: CleanupCallback) -> str:
    return getattr(callback, "__qualname__", None) or getattr(callback, "__name__", repr(callback))


# Global singleton instance
_coordinator: Optional[ShutdownCoordinator] = None


def get_shutdown_coordinator() -> ShutdownCoordinator:
    """Get the global shutdown coordinator instance."""
    global _coordinator
    if _coordinator is None:
        _coordinator = ShutdownCoordinator()
    return _coordinator


def reset_shutdown_coordinator() -> None:
    """Reset the global coordinator (mainly for testing)."""
    global _coordinator
    _coordinator = None
