from __future__ import annotations

import logging
import sys
from pathlib import Path

from mergeflow_io.utils.log import LOG_DATEFMT, LOG_FORMAT, resolve_log_dir, rotating_handler

APP_NAMESPACE = "mergeflow"

_LOGGER: logging.Logger | None = None


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the ``mergeflow`` logger, writing ``app.log`` in the shared log directory.

    Handlers are attached once per process. Module loggers under
    ``mergeflow.*`` (the render service) propagate into it.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    logger = logging.getLogger(APP_NAMESPACE)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(rotating_handler(resolve_log_dir(log_dir) / "app.log", level=logging.DEBUG))

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(console)

    _LOGGER = logger
    return logger


def set_level(level_name: str) -> logging.Logger:
    """Apply a level given by name (``DEBUG``, ``info``...) to the app logger."""

    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    logger = get_logger()
    logger.setLevel(level)
    return logger


def reset_logger() -> None:
    """Detach handlers so the next get_logger() call configures afresh."""

    global _LOGGER
    if _LOGGER is None:
        return
    for handler in list(_LOGGER.handlers):
        _LOGGER.removeHandler(handler)
        handler.close()
    _LOGGER = None
