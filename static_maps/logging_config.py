"""
Logging setup for static_maps.

Everything the package logs goes through the ``static_maps`` logger
tree: ``static_maps.tiles`` for grid, cache and download messages,
``static_maps.rendering.*`` for viewport and timing lines, and
``static_maps.cli`` for the command line. ``setup_logging`` attaches a
stdout handler (plus an optional file handler) to the top of that tree
and leaves the root logger alone apart from its level.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"

LOG_LEVEL_ENV = "STATIC_MAPS_LOG_LEVEL"

PACKAGE_LOGGER = "static_maps"

# -v / default / -q / --silent
_VERBOSITY_LEVELS = {
    1: logging.DEBUG,
    0: logging.INFO,
    -1: logging.WARNING,
    -2: logging.ERROR,
}

# HTTP and imaging libraries are chatty at DEBUG; keep them at WARNING
# even when the package itself runs verbose.
_NOISY_LIBRARIES = ("urllib3", "requests", "PIL", "matplotlib")


def level_for_verbosity(verbosity: int) -> int:
    """Map a CLI verbosity count to a logging level, honoring STATIC_MAPS_LOG_LEVEL."""
    clamped = max(-2, min(1, verbosity))
    level = _VERBOSITY_LEVELS[clamped]

    env_level = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if env_level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = getattr(logging, env_level)
    return level


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Configure the ``static_maps`` logger tree.

    Args:
        verbosity: 1 or more for DEBUG (tile grid, cache hits), 0 for INFO
            (render start and timing), -1 for WARNING (blank tiles only),
            -2 or less for ERROR
        log_file: Optional path; the file always receives DEBUG records
        format_string: Console format; defaults to a timestamped format,
            or a bare "LEVEL: message" one when verbosity is negative

    Environment Variables:
        STATIC_MAPS_LOG_LEVEL: Overrides the level derived from verbosity

    Example:
        >>> setup_logging(verbosity=1)
        >>> setup_logging(log_file="render.log")
    """
    level = level_for_verbosity(verbosity)
    if format_string is None:
        format_string = DEFAULT_FORMAT if verbosity >= 0 else SIMPLE_FORMAT

    logging.root.setLevel(logging.WARNING)
    for name in _NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    # Re-running setup must not stack handlers or leak file descriptors
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.addHandler(_handler(logging.StreamHandler(sys.stdout), level, format_string))

    if log_file:
        try:
            file_handler = logging.FileHandler(str(log_file), mode="a", encoding="utf-8")
        except OSError as e:
            logger.warning(f"Cannot open log file {log_file}, logging to console only: {e}")
        else:
            logger.addHandler(_handler(file_handler, logging.DEBUG, DEFAULT_FORMAT))
            logger.info(f"Logging to file: {log_file}")

    logger.debug(f"static_maps logging at {logging.getLevelName(level)}")


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the ``static_maps`` tree if it isn't already."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
