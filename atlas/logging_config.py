"""Logging configuration for the causal map engine."""

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = logging.INFO
ROOT_LOGGER = "atlas"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else LOG_LEVEL


def setup_logging(level: Union[int, str] = LOG_LEVEL) -> None:
    """
    Configure logging for scripts and notebooks.

    Installs a stdout handler on the root logger and sets the level of the
    ``atlas`` hierarchy. Unknown level names fall back to INFO. The library
    itself never calls this.
    """
    level = _resolve_level(level)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    logging.getLogger(ROOT_LOGGER).setLevel(level)
    logging.getLogger(__name__).info("Logging configured at %s", logging.getLevelName(level))


def get_logger(name: str) -> logging.Logger:
    """
    Logger inside the ``atlas`` hierarchy.

    Names outside it (script names, ``__main__``) are nested under ``atlas``
    so ``setup_logging`` levels apply to them too.
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
