"""Logging setup for the melody-echo command line.

Library code only ever calls get_logger(); handlers and levels are
installed here, once, by the CLI.
"""

import logging
import sys
from typing import Dict, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Per-logger levels; a --debug run lowers every melody_echo entry to DEBUG
MODULE_LOG_LEVELS = {
    "melody_echo": logging.INFO,
    "melody_echo.cli": logging.INFO,
    # Matching runs five times a second, set to DEBUG to see every sample
    "melody_echo.sequence_matcher": logging.INFO,
    "melody_echo.note_matcher": logging.INFO,
    "melody_echo.polling": logging.INFO,
    "melody_echo.exercise": logging.INFO,
    "melody_echo.core": logging.INFO,
    "melody_echo.audio": logging.INFO,
    "melody_echo.ui": logging.WARNING,
    "melody_echo.logger": logging.WARNING,
    # Third-party
    "aubio": logging.ERROR,
    "PIL": logging.ERROR,
    # Root logger
    "": logging.ERROR,
}

_console_handler: Optional[logging.Handler] = None


def _shared_handler() -> logging.Handler:
    global _console_handler

    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return _console_handler


def _resolve_levels(level: Optional[str]) -> Dict[str, int]:
    levels = dict(MODULE_LOG_LEVELS)
    if not level:
        return levels

    override = logging.getLevelName(level.upper())
    if not isinstance(override, int):
        logging.getLogger(__name__).error(f"Invalid log level: {level}")
        return levels

    for name in levels:
        if name.startswith("melody_echo"):
            levels[name] = override
    return levels


def setup_logging(level: Optional[str] = None) -> None:
    """Attach the shared stdout handler and apply per-module levels.

    Args:
        level: Optional level name (e.g. "DEBUG") applied to every melody_echo logger
    """
    handler = _shared_handler()

    for name, module_level in _resolve_levels(level).items():
        logger = logging.getLogger(name)
        logger.setLevel(module_level)
        for existing in logger.handlers[:]:
            logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.propagate = False

    logging.getLogger("melody_echo").debug("Logging configured")
