"""Cleanup of leftovers from clock instances that died without cleaning up.

A SIGKILLed instance cannot remove its scratch video, and its playback
ffmpeg keeps drawing on the framebuffer after the parent is gone. Both
are detected by the pid embedded in the scratch file name.
"""

import os
import re
from pathlib import Path
from typing import List

import psutil

from video_clock.core.logging_utils import get_module_logger
from video_clock.core.paths import ARTIFACT_PREFIX, ARTIFACT_SUFFIX, TEMP_DIR

logger = get_module_logger("OrphanCleanup")

_ARTIFACT_RE = re.compile(re.escape(ARTIFACT_PREFIX) + r"(\d+)" + re.escape(ARTIFACT_SUFFIX) + "$")


def artifact_owner(path: Path) -> int:
    """Return the pid encoded in a scratch file name, or -1."""
    match = _ARTIFACT_RE.match(Path(path).name)
    return int(match.group(1)) if match else -1


def find_stale_artifacts(temp_dir: Path = TEMP_DIR) -> List[Path]:
    """Scratch videos whose owning process no longer exists."""
    stale = []
    current_pid = os.getpid()

    try:
        candidates = sorted(Path(temp_dir).glob(f"{ARTIFACT_PREFIX}*{ARTIFACT_SUFFIX}"))
    except OSError as e:
        logger.debug("Cannot scan %s: %s", temp_dir, e)
        return stale

    for path in candidates:
        pid = artifact_owner(path)
        if pid < 0 or pid == current_pid:
            continue
        if not psutil.pid_exists(pid):
            stale.append(path)

    return stale


def remove_stale_artifacts(temp_dir: Path = TEMP_DIR) -> int:
    """Delete scratch videos left by dead instances.

    Returns:
        Number of files removed
    """
    removed = 0
    for path in find_stale_artifacts(temp_dir):
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning("Could not remove stale file %s: %s", path, e)
            continue
        logger.info("Removed stale temporary file %s", path)
        removed += 1
    return removed


def find_orphaned_players() -> List[psutil.Process]:
    """Find ffmpeg processes reading a scratch video whose parent has died.

    An orphan's parent is gone or has been re-parented to init.
    """
    orphaned = []
    current_pid = os.getpid()

    for proc in psutil.process_iter(['pid', 'name', 'cmdline']):
        try:
            if proc.pid == current_pid:
                continue

            cmdline = proc.info.get('cmdline') or []
            if not cmdline or 'ffmpeg' not in Path(cmdline[0]).name:
                continue
            if not any(ARTIFACT_PREFIX in arg for arg in cmdline):
                continue

            try:
                parent = proc.parent()
                if parent is None or parent.pid == 1:
                    orphaned.append(proc)
                    logger.debug("Found orphaned player: pid=%d", proc.pid)
            except psutil.NoSuchProcess:
                orphaned.append(proc)

        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue

    return orphaned


def cleanup_orphaned_players(timeout: float = 5.0) -> int:
    """Terminate orphaned players, force-killing any that linger.

    Args:
        timeout: Seconds to wait for graceful termination before SIGKILL

    Returns:
        Number of processes signalled
    """
    orphaned = find_orphaned_players()
    if not orphaned:
        return 0

    signalled = 0
    logger.info("Found %d orphaned ffmpeg process(es)", len(orphaned))

    for proc in orphaned:
        try:
            logger.warning("Terminating orphaned ffmpeg: pid=%d", proc.pid)
            proc.terminate()
            signalled += 1
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    gone, alive = psutil.wait_procs(orphaned, timeout=timeout)
    if gone:
        logger.debug("Gracefully terminated %d process(es)", len(gone))

    for proc in alive:
        try:
            logger.warning("Force killing unresponsive ffmpeg: pid=%d", proc.pid)
            proc.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

    if alive:
        psutil.wait_procs(alive, timeout=1.0)

    return signalled


__all__ = [
    "artifact_owner",
    "cleanup_orphaned_players",
    "find_orphaned_players",
    "find_stale_artifacts",
    "remove_stale_artifacts",
]
