"""Unified logging configuration for Twinlayer.

Usage:
    from twinlayer.core.logging_config import setup_logging, get_logger

    logger = setup_logging("twinlayer.main", level="DEBUG")
    engine_logger = get_logger("twinlayer.game_engine")
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterable

__all__ = [
    "COMPACT_FORMAT",
    "DEFAULT_FORMAT",
    "DETAILED_FORMAT",
    "STRUCTURED_FORMAT",
    "configure_third_party_loggers",
    "get_logger",
    "setup_logging",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
COMPACT_FORMAT = "%(levelname)s %(name)s: %(message)s"
DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(filename)s:%(lineno)d - %(message)s"
)
STRUCTURED_FORMAT = (
    '{"time": "%(asctime)s", "logger": "%(name)s", '
    '"level": "%(levelname)s", "message": "%(message)s"}'
)

_FORMATS = {
    "default": DEFAULT_FORMAT,
    "compact": COMPACT_FORMAT,
    "detailed": DETAILED_FORMAT,
    "structured": STRUCTURED_FORMAT,
}

# Packages whose INFO chatter drowns out engine logs.
NOISY_PACKAGES = ("urllib3", "httpx", "httpcore", "uvicorn.access", "asyncio")


def setup_logging(
    name: str = "twinlayer",
    level: int | str = logging.INFO,
    format_style: str = "default",
    console: bool = True,
    log_file: str | Path | None = None,
    log_dir: str | Path | None = None,
    propagate: bool = False,
) -> logging.Logger:
    """Configure and return the logger ``name``.

    Calling it again for the same name updates the level but does not
    stack duplicate handlers.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = propagate

    formatter = logging.Formatter(_FORMATS.get(format_style, DEFAULT_FORMAT))

    if console and not any(
        type(h) is logging.StreamHandler for h in logger.handlers
    ):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if log_file is None and log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{name.replace('.', '_')}.log"

    if log_file is not None:
        log_path = Path(log_file).resolve()
        if not any(
            isinstance(h, logging.FileHandler)
            and Path(h.baseFilename) == log_path
            for h in logger.handlers
        ):
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the module logger ``name`` without touching its handlers."""
    return logging.getLogger(name)


def configure_third_party_loggers(
    quiet: bool = True,
    verbose_packages: Iterable[str] | None = None,
) -> None:
    """Raise noisy third-party loggers to WARNING unless listed as verbose."""
    if not quiet:
        return
    keep = set(verbose_packages or ())
    for package in NOISY_PACKAGES:
        if package not in keep:
            logging.getLogger(package).setLevel(logging.WARNING)

