"""Unit tests for leftover scratch file and player cleanup."""

import os
from unittest.mock import MagicMock

import psutil
import pytest

from video_clock.core import orphan_cleanup
from video_clock.core.orphan_cleanup import (
    artifact_owner,
    cleanup_orphaned_players,
    find_orphaned_players,
    find_stale_artifacts,
    remove_stale_artifacts,
)


def test_artifact_owner(tmp_path):
    assert artifact_owner(tmp_path / "videoclock_bg_1234.mp4") == 1234
    assert artifact_owner(tmp_path / "videoclock_bg_.mp4") == -1
    assert artifact_owner(tmp_path / "videoclock_bg_12.mkv") == -1
    assert artifact_owner(tmp_path / "other.mp4") == -1


class TestStaleArtifacts:

    @pytest.fixture
    def scratch(self, tmp_path, monkeypatch):
        alive = {os.getpid(), 200}
        monkeypatch.setattr(orphan_cleanup.psutil, "pid_exists", lambda pid: pid in alive)

        for name in (
            f"videoclock_bg_{os.getpid()}.mp4",
            "videoclock_bg_200.mp4",
            "videoclock_bg_300.mp4",
            "videoclock_bg_301.mp4",
            "unrelated.mp4",
        ):
            (tmp_path / name).write_bytes(b"")
        return tmp_path

    def test_find_only_dead_owners(self, scratch):
        stale = find_stale_artifacts(scratch)

        assert [p.name for p in stale] == ["videoclock_bg_300.mp4", "videoclock_bg_301.mp4"]

    def test_remove(self, scratch):
        assert remove_stale_artifacts(scratch) == 2

        remaining = sorted(p.name for p in scratch.iterdir())
        assert remaining == sorted([
            f"videoclock_bg_{os.getpid()}.mp4",
            "videoclock_bg_200.mp4",
            "unrelated.mp4",
        ])

    def test_missing_directory(self, tmp_path):
        assert find_stale_artifacts(tmp_path / "gone") == []


def _proc(pid, cmdline, parent_pid):
    proc = MagicMock(spec=psutil.Process)
    proc.pid = pid
    proc.info = {"pid": pid, "name": cmdline[0], "cmdline": cmdline}
    if parent_pid is None:
        proc.parent.return_value = None
    else:
        proc.parent.return_value = MagicMock(pid=parent_pid)
    return proc


class TestOrphanedPlayers:

    @pytest.fixture
    def processes(self, monkeypatch):
        procs = [
            _proc(10, ["/usr/bin/ffmpeg", "-i", "/tmp/videoclock_bg_9.mp4"], 1),
            _proc(11, ["ffmpeg", "-i", "/tmp/videoclock_bg_8.mp4"], None),
            _proc(12, ["ffmpeg", "-i", "/tmp/videoclock_bg_7.mp4"], 4242),
            _proc(13, ["ffmpeg", "-i", "/home/user/movie.mp4"], 1),
            _proc(14, ["vlc", "/tmp/videoclock_bg_9.mp4"], 1),
        ]
        monkeypatch.setattr(orphan_cleanup.psutil, "process_iter", lambda attrs=None: iter(procs))
        return procs

    def test_find(self, processes):
        assert [p.pid for p in find_orphaned_players()] == [10, 11]

    def test_cleanup_terminates_then_kills(self, processes, monkeypatch):
        first, second = processes[0], processes[1]
        waits = []

        def fake_wait_procs(procs, timeout=None):
            waits.append([p.pid for p in procs])
            if len(waits) == 1:
                return [first], [second]
            return list(procs), []

        monkeypatch.setattr(orphan_cleanup.psutil, "wait_procs", fake_wait_procs)

        assert cleanup_orphaned_players(timeout=0.1) == 2

        first.terminate.assert_called_once()
        second.terminate.assert_called_once()
        first.kill.assert_not_called()
        second.kill.assert_called_once()
        assert waits == [[10, 11], [11]]

    def test_cleanup_nothing_found(self, monkeypatch):
        monkeypatch.setattr(orphan_cleanup.psutil, "process_iter", lambda attrs=None: iter([]))

        assert cleanup_orphaned_players() == 0
