import asyncio
import re
from pathlib import Path
from typing import Dict, Iterable, Optional

import aiofiles

from video_clock.core.logging_utils import get_module_logger


logger = get_module_logger("ConfigManager")

_INLINE_COMMENT = re.compile(r'\s+#.*$')


class ConfigManager:
    """Reads shell-style ``KEY=value`` configuration files.

    The clock's configuration file is a plain POSIX shell fragment, so
    values may be quoted and ``#`` starts a comment only at the start of
    a line or after whitespace. That keeps hex colors such as
    ``TEXT_COLOR=#FFCC00`` intact.
    """

    def __init__(self):
        self.logger = get_module_logger("ConfigManager")

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _parse_value(raw: str) -> Optional[str]:
        if raw[:1] in ('"', "'"):
            quote = raw[0]
            end = raw.find(quote, 1)
            while quote == '"' and end > 0 and raw[end - 1] == '\\':
                end = raw.find(quote, end + 1)
            if end < 0:
                return None
            rest = raw[end + 1:].strip()
            if rest and not rest.startswith('#'):
                return None
            value = raw[1:end]
            if quote == '"':
                value = value.replace('\\"', '"')
            return value

        return _INLINE_COMMENT.sub('', raw).strip()

    def _parse_config_lines(self, lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for lineno, raw_line in enumerate(lines, 1):
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue
            if line.startswith('export '):
                line = line[len('export '):].lstrip()
            if '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            if not key:
                continue

            parsed = self._parse_value(value.strip())
            if parsed is None:
                logger.warning("Ignoring line %d: malformed quoted value for %s", lineno, key)
                continue

            config[key] = parsed

        return config

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Read ``config_path``; a missing or unreadable file yields an empty dict."""
        config: Dict[str, str] = {}

        if not config_path.exists():
            logger.info("Config file %s not found, using defaults", config_path)
            return config

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = self._parse_config_lines(f)
        except OSError as e:
            logger.error("Failed to read config %s: %s", config_path, e)

        return config

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        """Async version for use in async contexts."""
        config: Dict[str, str] = {}

        if not await asyncio.to_thread(config_path.exists):
            logger.info("Config file %s not found, using defaults", config_path)
            return config

        try:
            lines: list[str] = []
            async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                async for line in f:
                    lines.append(line)
            config = self._parse_config_lines(lines)
        except OSError as e:
            logger.error("Failed to read config %s: %s", config_path, e)

        return config

    def get_bool(self, config: Dict[str, str], key: str, default: bool = False) -> bool:
        if key not in config:
            return default

        value = config[key].lower()
        return value in ('true', '1', 'yes', 'on')

    def get_int(self, config: Dict[str, str], key: str, default: int = 0) -> int:
        if key not in config:
            return default

        try:
            return int(config[key])
        except ValueError:
            logger.warning("Invalid int value for %s: %s, using default %d", key, config[key], default)
            return default

    def get_float(self, config: Dict[str, str], key: str, default: float = 0.0) -> float:
        if key not in config:
            return default

        try:
            return float(config[key])
        except ValueError:
            logger.warning("Invalid float value for %s: %s, using default %f", key, config[key], default)
            return default

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        value = config.get(key, "")
        return value if value else default


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager
