"""Unit tests for the shell-style configuration reader."""

from pathlib import Path

import pytest

from video_clock.core.config_manager import ConfigManager, get_config_manager


@pytest.fixture
def manager() -> ConfigManager:
    return ConfigManager()


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "videoClock.conf"
    path.write_text(text, encoding="utf-8")
    return path


class TestReadConfig:

    def test_missing_file_yields_empty(self, manager, tmp_path):
        assert manager.read_config(tmp_path / "absent.conf") == {}

    def test_plain_and_quoted_values(self, manager, tmp_path):
        path = _write(tmp_path, (
            "# Video clock settings\n"
            "\n"
            "VIDEO_SOURCE=/srv/media/loop.mp4\n"
            'FONT_FILE="/usr/share/fonts/My Font.ttf"\n'
            "TIME_FORMAT='24h'\n"
            "export FRAMEBUFFER=/dev/fb1\n"
        ))

        config = manager.read_config(path)

        assert config == {
            "VIDEO_SOURCE": "/srv/media/loop.mp4",
            "FONT_FILE": "/usr/share/fonts/My Font.ttf",
            "TIME_FORMAT": "24h",
            "FRAMEBUFFER": "/dev/fb1",
        }

    def test_inline_comments(self, manager, tmp_path):
        path = _write(tmp_path, (
            "SMALL_FONT_SIZE=40  # date line\n"
            'TEXT_COLOR="yellow" # quoted\n'
        ))

        config = manager.read_config(path)

        assert config["SMALL_FONT_SIZE"] == "40"
        assert config["TEXT_COLOR"] == "yellow"

    def test_hex_color_is_not_a_comment(self, manager, tmp_path):
        path = _write(tmp_path, "TEXT_COLOR=#FFCC00\nTEXT_BG_COLOR=#000000@0.3\n")

        config = manager.read_config(path)

        assert config["TEXT_COLOR"] == "#FFCC00"
        assert config["TEXT_BG_COLOR"] == "#000000@0.3"

    def test_escaped_double_quote(self, manager, tmp_path):
        path = _write(tmp_path, 'VIDEO_SOURCE="/media/\\"quoted\\".mp4"\n')

        assert manager.read_config(path)["VIDEO_SOURCE"] == '/media/"quoted".mp4'

    def test_malformed_quote_is_skipped(self, manager, tmp_path):
        path = _write(tmp_path, 'FONT_FILE="/unterminated\nTIME_FORMAT=24h\nTEXT_COLOR="red" trailing\n')

        config = manager.read_config(path)

        assert "FONT_FILE" not in config
        assert "TEXT_COLOR" not in config
        assert config["TIME_FORMAT"] == "24h"

    def test_lines_without_assignment_are_ignored(self, manager, tmp_path):
        path = _write(tmp_path, "just words\n=novalue\nKEY=\n")

        assert manager.read_config(path) == {"KEY": ""}

    @pytest.mark.asyncio
    async def test_async_read_matches_sync(self, manager, tmp_path):
        path = _write(tmp_path, "TIME_FORMAT=24h\nTEXT_COLOR=#FFCC00 # gold\n")

        assert await manager.read_config_async(path) == manager.read_config(path)

    @pytest.mark.asyncio
    async def test_async_missing_file(self, manager, tmp_path):
        assert await manager.read_config_async(tmp_path / "absent.conf") == {}


class TestTypedGetters:

    def test_get_str_falls_back_on_empty(self, manager):
        config = {"FONT_FILE": "", "TEXT_COLOR": "red"}

        assert manager.get_str(config, "FONT_FILE", "default.ttf") == "default.ttf"
        assert manager.get_str(config, "TEXT_COLOR", "white") == "red"
        assert manager.get_str(config, "MISSING", "x") == "x"

    def test_get_int(self, manager):
        config = {"A": "12", "B": "twelve"}

        assert manager.get_int(config, "A", 1) == 12
        assert manager.get_int(config, "B", 1) == 1
        assert manager.get_int(config, "C", 7) == 7

    def test_get_float(self, manager):
        assert manager.get_float({"D": "0.25"}, "D", 1.0) == 0.25
        assert manager.get_float({"D": "soon"}, "D", 1.0) == 1.0

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("YES", True), ("1", True), ("on", True),
        ("false", False), ("0", False), ("off", False),
    ])
    def test_get_bool(self, manager, raw, expected):
        assert manager.get_bool({"FLAG": raw}, "FLAG") is expected

    def test_singleton(self):
        assert get_config_manager() is get_config_manager()
