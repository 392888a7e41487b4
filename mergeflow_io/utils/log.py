"""Logging helpers shared by mergeflow_io and the mergeflow application."""

# Module responsibilities:
# - Resolve the log directory once for both packages ($MERGEFLOW_LOG_DIR wins).
# - Configure the ``mergeflow_io`` namespace lazily on first get_logger() call.

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_BASE = Path.home() / "MergeFlow" / "logs"
LOG_DIR_ENV = "MERGEFLOW_LOG_DIR"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 2_000_000
LOG_BACKUPS = 3

_IO_NAMESPACE = "mergeflow_io"
_io_configured = False


def resolve_log_dir(log_dir: Optional[Path] = None) -> Path:
    """Return the directory log files go to, creating it when missing."""

    env_dir = os.getenv(LOG_DIR_ENV)
    target = Path(log_dir) if log_dir is not None else (Path(env_dir) if env_dir else DEFAULT_LOG_BASE)
    target.mkdir(parents=True, exist_ok=True)
    return target


def rotating_handler(path: Path, level: int = logging.INFO) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler.setLevel(level)
    return handler


def get_logger(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """Return ``mergeflow_io.<name>``, configuring the namespace on first use.

    Records go to ``mergeflow_io.log``; only warnings and above reach the console.
    """

    global _io_configured
    if not _io_configured:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
        console.setLevel(logging.WARNING)

        package_logger = logging.getLogger(_IO_NAMESPACE)
        package_logger.setLevel(logging.INFO)
        package_logger.addHandler(rotating_handler(resolve_log_dir(log_dir) / "mergeflow_io.log"))
        package_logger.addHandler(console)
        package_logger.propagate = False
        _io_configured = True

    return logging.getLogger(f"{_IO_NAMESPACE}.{name}")
