"""
Media Engine - Runs ffmpeg/ffprobe as child processes.

Every invocation races the child against the shared stop event. If stop
wins, the child is sent SIGTERM, then SIGKILL after ``terminate_timeout``,
and is reaped before ``ShutdownRequested`` is raised. Cancelling the
awaiting task tears the child down the same way, so no ffmpeg is ever
left writing to the framebuffer after we return.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from video_clock.core.errors import EngineError, ShutdownRequested
from video_clock.core.logging_utils import get_module_logger

logger = get_module_logger("MediaEngine")


@dataclass
class EngineResult:
    """Outcome of one finished engine invocation."""
    argv: List[str]
    returncode: int
    output: str = ""
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class MediaEngine:
    """
    Launches media engine commands and waits for them cooperatively.

    Usage:
        engine = MediaEngine()
        result = await engine.run(argv, stop_event, capture_output=True)
        if not result.ok:
            ...
    """

    def __init__(self, terminate_timeout: float = 3.0, drain_timeout: float = 1.0):
        """
        Args:
            terminate_timeout: Seconds to wait after SIGTERM before SIGKILL
            drain_timeout: Seconds to keep reading output after the child exits
        """
        self.terminate_timeout = terminate_timeout
        self.drain_timeout = drain_timeout

    async def run(
        self,
        argv: Sequence[str],
        stop_event: asyncio.Event,
        *,
        capture_output: bool = False,
        label: Optional[str] = None,
    ) -> EngineResult:
        """
        Run ``argv`` to completion unless ``stop_event`` fires first.

        Args:
            argv: Command and arguments
            stop_event: Set when the clock is asked to stop
            capture_output: Collect stdout+stderr combined and return it;
                otherwise stderr lines are relayed to the log
            label: Name used in log messages (defaults to the executable)

        Raises:
            ShutdownRequested: stop_event was set before the child exited
            EngineError: the executable could not be started
        """
        argv = [str(arg) for arg in argv]
        label = label or argv[0]

        if stop_event.is_set():
            raise ShutdownRequested(f"before {label} started")

        started = time.perf_counter()
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE if capture_output else asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.STDOUT if capture_output else asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EngineError(argv[0], str(e)) from e

        logger.debug("Started %s (pid %d): %s", label, process.pid, " ".join(argv))

        chunks: List[str] = []
        if capture_output:
            reader = asyncio.create_task(self._collect(process.stdout, chunks))
        else:
            reader = asyncio.create_task(self._relay(process.stderr, label))

        waiter = asyncio.create_task(process.wait())
        stopper = asyncio.create_task(stop_event.wait())
        stopped = False

        try:
            await asyncio.wait({waiter, stopper}, return_when=asyncio.FIRST_COMPLETED)
            stopped = not waiter.done()
        except BaseException:
            reader.cancel()
            raise
        finally:
            stopper.cancel()
            if process.returncode is None:
                logger.info("Terminating %s (pid %d)", label, process.pid)
                await self._terminate(process, label)
            if not waiter.done():
                waiter.cancel()

        await self._finish_reader(reader, label)
        duration_ms = (time.perf_counter() - started) * 1000

        if stopped:
            raise ShutdownRequested(f"during {label}")

        logger.debug("%s exited with code %d after %.1fms", label, process.returncode, duration_ms)
        return EngineResult(
            argv=argv,
            returncode=process.returncode,
            output="".join(chunks),
            duration_ms=duration_ms,
        )

    async def _terminate(self, process: asyncio.subprocess.Process, label: str) -> None:
        try:
            process.terminate()
        except ProcessLookupError:
            return

        try:
            await asyncio.wait_for(process.wait(), timeout=self.terminate_timeout)
        except asyncio.TimeoutError:
            logger.warning("%s did not terminate, sending SIGKILL", label)
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    async def _finish_reader(self, reader: asyncio.Task, label: str) -> None:
        try:
            await asyncio.wait_for(reader, timeout=self.drain_timeout)
        except asyncio.TimeoutError:
            logger.debug("Output of %s still open after exit, dropping the rest", label)

    @staticmethod
    async def _collect(stream: Optional[asyncio.StreamReader], chunks: List[str]) -> None:
        if stream is None:
            return
        while True:
            chunk = await stream.read(4096)
            if not chunk:
                break
            chunks.append(chunk.decode(errors="replace"))

    @staticmethod
    async def _relay(stream: Optional[asyncio.StreamReader], label: str) -> None:
        if stream is None:
            return
        while True:
            try:
                line = await stream.readline()
            except ValueError:
                # over-long line; readline already discarded it
                continue
            if not line:
                break
            text = line.decode(errors="replace").strip()
            if text:
                logger.warning("%s: %s", label, text)


__all__ = ["EngineResult", "MediaEngine"]
