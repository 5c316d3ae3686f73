"""Logging configuration shared by the CLI and library entry points.

Provides helpers:
* ``setup_logging`` – idempotent configuration of a single stderr handler.
* ``level_from_verbosity`` – map ``-v``/``-q`` counts to a level.
"""

from __future__ import annotations

import logging
import os

# ----- Custom TRACE level -------------------------------------------------
TRACE_LEVEL = 5
if not hasattr(logging, "TRACE"):
    logging.addLevelName(TRACE_LEVEL, "TRACE")

# ----- Formatter -----------------------------------------------------------
DEFAULT_FORMAT = "%(levelname)s | %(name)s | %(message)s"
DEBUG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s | %(message)s"

__all__ = [
    "TRACE_LEVEL",
    "DEFAULT_FORMAT",
    "setup_logging",
    "level_from_verbosity",
]


def level_from_verbosity(verbose: int, quiet: bool = False) -> int:
    """Translate CLI verbosity flags to a logging level.

    Args:
        verbose: Number of ``-v`` flags given.
        quiet: Whether ``-q`` was given; wins over ``verbose``.

    Returns:
        Logging level (``TRACE_LEVEL`` for three or more ``-v``).
    """

    if quiet:
        return logging.ERROR
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    if verbose == 2:
        return logging.DEBUG
    return TRACE_LEVEL


def _env_level() -> int | None:
    level_name = os.getenv("LOG_LEVEL")
    if not level_name:
        return None
    level_name = level_name.upper()
    if level_name == "TRACE":
        return TRACE_LEVEL
    level = getattr(logging, level_name, None)
    return level if isinstance(level, int) else None


def setup_logging(level: int = logging.WARNING, force: bool = False) -> None:
    """Configure the ``hueforge`` logger hierarchy.

    A single stream handler on stderr is attached to the package logger so
    the library never touches the root logger of an embedding application.
    The ``LOG_LEVEL`` environment variable overrides ``level``. Idempotent
    unless ``force`` is set.
    """
    if getattr(setup_logging, "_configured", False) and not force:
        return

    pkg = logging.getLogger("hueforge")
    if force:
        for h in list(pkg.handlers):
            pkg.removeHandler(h)

    env_level = _env_level()
    if env_level is not None:
        level = env_level
    pkg.setLevel(level)

    fmt = logging.Formatter(DEBUG_FORMAT if level <= logging.DEBUG else DEFAULT_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.setLevel(level)
    pkg.addHandler(console)

    setup_logging._configured = True  # type: ignore[attr-defined]
