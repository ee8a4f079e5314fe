"""Loguru sinks for the resolver: console plus a rotating file."""

import sys
from pathlib import Path

from loguru import logger

from address_resolver.config import Settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{thread.name}</magenta> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | "
    "{name}:{function}:{line} - {message}"
)


def setup_logging(settings: Settings) -> None:
    """
    Route resolver logs to stderr and to ``settings.log_file``.

    Race branches run on ``provider-race`` worker threads, so both sinks
    print the thread name to tell a branch's lines apart from the caller's.
    Safe to call again; earlier sinks are replaced.
    """
    logger.remove()

    logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT)

    Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)

    # Writes go through a queue so worker threads never block on file I/O
    logger.add(
        settings.log_file,
        level=settings.log_level,
        format=FILE_FORMAT,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        enqueue=True,
    )

    logger.debug(
        "Resolver logging ready (level={}, file={})", settings.log_level, settings.log_file
    )
