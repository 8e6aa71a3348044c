"""
Logging setup for evoprop runs.

Library modules only emit records through loguru's global 'logger';
sinks are installed here, by the scripts that drive a simulation.
"""

import sys

from loguru import logger


def setup_logger(level: str = "INFO", log_file: str | None = None, enable_colors: bool = True) -> None:
    """
    Replace loguru's default handler with a console sink and, optionally, a file sink.

    Parameters:
        level:         Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file:      Path of a log file to write to as well (None for console only)
        enable_colors: Whether to colorize console output (only when attached to a TTY)
    """
    logger.remove()

    colorize = enable_colors and sys.stderr.isatty()
    if colorize:
        console_format = (
            "<green>{time:HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<yellow>{line}</yellow> | "
            "<level>{message}</level>"
        )
    else:
        console_format = "{time:HH:mm:ss.SSS} | {level: <8} | {name}:{line} | {message}"

    logger.add(sys.stderr, level=level, format=console_format, colorize=colorize)

    if log_file is not None:
        logger.add(
            log_file,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            encoding="utf-8",
        )
