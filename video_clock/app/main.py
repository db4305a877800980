import argparse
import asyncio
import os
import signal
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from video_clock.core.config_manager import get_config_manager
from video_clock.core.controller import EXIT_FAILURE, EXIT_OK, VideoClockController
from video_clock.core.logging_config import LOG_LEVELS, configure_logging
from video_clock.core.logging_utils import get_module_logger
from video_clock.core.paths import CONFIG_PATH
from video_clock.core.settings import ClockSettings
from video_clock.core.shutdown_coordinator import get_shutdown_coordinator


logger = get_module_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; the config file supplies defaults."""
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", type=Path, default=CONFIG_PATH)
    pre_args, _ = pre_parser.parse_known_args(argv)

    config_manager = get_config_manager()
    config = config_manager.read_config(pre_args.config)

    default_log_level = config_manager.get_str(config, 'LOG_LEVEL', default='info').lower()
    if default_log_level not in LOG_LEVELS:
        default_log_level = 'info'
    default_log_file = config_manager.get_str(config, 'LOG_FILE', default='') or None

    parser = argparse.ArgumentParser(
        description="Video clock - looping video background with a live clock on a framebuffer"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_PATH,
        help=f"Configuration file (default: {CONFIG_PATH})"
    )

    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default=default_log_level,
        help="Logging level (default: info)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=Path(default_log_file) if default_log_file else None,
        help="Also write logs to this rotating file"
    )

    parser.add_argument(
        "--console",
        dest="console_output",
        action="store_true",
        default=True,
        help="Log to stderr (default)"
    )

    parser.add_argument(
        "--no-console",
        dest="console_output",
        action="store_false",
        help="Log to --log-file only (requires a log file)"
    )

    parser.add_argument(
        "--restart-delay",
        type=float,
        default=None,
        help="Seconds to wait before restarting playback after ffmpeg exits (default: 1.0)"
    )

    args = parser.parse_args(argv)
    if not args.console_output and args.log_file is None:
        parser.error("--no-console requires --log-file or LOG_FILE in the config")
    return args


def _install_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    coordinator = get_shutdown_coordinator()

    for sig in (signal.SIGINT, signal.SIGTERM, signal.SIGHUP):
        try:
            loop.add_signal_handler(sig, coordinator.request_stop, sig.name)
        except (NotImplementedError, RuntimeError):
            pass  # no signal support on this loop


async def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the video clock.

    Shutdown Sequence:
    1. The supervisor sends SIGINT/SIGTERM (or playback setup fails)
    2. The signal handler sets the coordinator's stop event
    3. The running ffmpeg is terminated and the controller unwinds
    4. The coordinator runs the resource undo exactly once
    5. Exit code 0 for a clean stop, 1 for a startup failure
    """
    args = parse_args(argv)

    configure_logging(
        args.log_level,
        console=args.console_output,
        log_file=args.log_file,
        suppressed_loggers=("asyncio",),
    )

    config = await get_config_manager().read_config_async(args.config)
    settings = ClockSettings.from_config(config)
    if args.restart_delay is not None:
        settings = _with_restart_delay(settings, args.restart_delay)

    logger.info("=" * 60)
    logger.info("Video Clock starting (pid %d)", os.getpid())
    logger.info("=" * 60)
    logger.info("Config file: %s", args.config)
    logger.info("Video source: %s", settings.video_source)
    logger.info("Framebuffer: %s", settings.framebuffer)

    _install_signal_handlers(asyncio.get_running_loop())

    controller = VideoClockController(settings)
    exit_code = await controller.run()

    logger.info("Video Clock stopped (exit code %d)", exit_code)
    return exit_code


def _with_restart_delay(settings: ClockSettings, delay: float) -> ClockSettings:
    if delay < 0:
        logger.warning("--restart-delay must not be negative, keeping %.1f", settings.restart_delay)
        return settings
    return replace(settings, restart_delay=delay)


def run(argv: Optional[list[str]] = None) -> int:
    try:
        return asyncio.run(main(argv))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_OK
    except Exception as exc:  # pragma: no cover - fatal guard
        print(f"Fatal error: {exc}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(run())
