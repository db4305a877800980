"""Tests for the command-line entry point."""

import logging
from pathlib import Path

import pytest

from video_clock.app.main import main, parse_args, run
from video_clock.core.controller import EXIT_FAILURE


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def _config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "videoClock.conf"
    path.write_text(text, encoding="utf-8")
    return path


class TestParseArgs:

    def test_defaults(self, tmp_path):
        args = parse_args(["--config", str(tmp_path / "absent.conf")])

        assert args.config == tmp_path / "absent.conf"
        assert args.log_level == "info"
        assert args.log_file is None
        assert args.console_output is True
        assert args.restart_delay is None

    def test_config_supplies_logging_defaults(self, tmp_path):
        config = _config(tmp_path, f"LOG_LEVEL=DEBUG\nLOG_FILE={tmp_path / 'clock.log'}\n")

        args = parse_args(["--config", str(config)])

        assert args.log_level == "debug"
        assert args.log_file == tmp_path / "clock.log"

    def test_command_line_wins(self, tmp_path):
        config = _config(tmp_path, "LOG_LEVEL=debug\n")

        args = parse_args([
            "--config", str(config),
            "--log-level", "warning",
            "--no-console",
            "--log-file", str(tmp_path / "clock.log"),
            "--restart-delay", "0.5",
        ])

        assert args.log_level == "warning"
        assert args.console_output is False
        assert args.restart_delay == 0.5

    def test_unknown_config_level_falls_back(self, tmp_path):
        config = _config(tmp_path, "LOG_LEVEL=chatty\n")

        assert parse_args(["--config", str(config)]).log_level == "info"

    def test_no_console_needs_a_log_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["--config", str(tmp_path / "absent.conf"), "--no-console"])

        assert excinfo.value.code == 2
        assert "--no-console requires" in capsys.readouterr().err

    def test_no_console_with_config_log_file(self, tmp_path):
        config = _config(tmp_path, f"LOG_FILE={tmp_path / 'clock.log'}\n")

        args = parse_args(["--config", str(config), "--no-console"])

        assert args.console_output is False
        assert args.log_file == tmp_path / "clock.log"


class TestMain:

    @pytest.mark.asyncio
    async def test_missing_ffmpeg_exits_with_failure(self, tmp_path):
        log_file = tmp_path / "clock.log"
        config = _config(tmp_path, (
            f"FFMPEG_BIN={tmp_path / 'no-ffmpeg'}\n"
            f"VIDEO_SOURCE={tmp_path / 'bg.mp4'}\n"
            "CLEANUP_ORPHANS=no\n"
        ))

        exit_code = await main(["--config", str(config), "--no-console", "--log-file", str(log_file)])

        assert exit_code == EXIT_FAILURE
        log_text = log_file.read_text(encoding="utf-8")
        assert "Required command is not installed" in log_text
        assert "no-ffmpeg" in log_text

    def test_run_returns_exit_code(self, tmp_path):
        config = _config(tmp_path, f"FONT_FILE={tmp_path / 'missing.ttf'}\nFFMPEG_BIN={tmp_path / 'x'}\n")

        assert run([
            "--config", str(config),
            "--no-console",
            "--log-file", str(tmp_path / "clock.log"),
        ]) == EXIT_FAILURE
