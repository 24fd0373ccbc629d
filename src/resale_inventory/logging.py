"""Console logging shared by every module of the package.

All loggers are children of the ``resale_inventory`` logger; handlers live on
that parent only, so they are attached once no matter how many modules ask
for a logger. ``LOG_LEVEL`` (default INFO) sets the level and ``LOG_FILE``
adds an append-mode file handler.
"""

import logging
import os
from typing import Optional

ROOT_LOGGER_NAME = "resale_inventory"

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def level_from_env(value: Optional[str] = None) -> int:
    """Map a LOG_LEVEL string ("debug", "WARN", "20") to a logging level."""
    raw = (value if value is not None else os.environ.get("LOG_LEVEL", "INFO")).strip().upper()
    if raw.isdigit():
        return int(raw)
    if raw == "WARN":
        raw = "WARNING"
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.INFO


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(handler)


def _package_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        return root
    level = level_from_env()
    root.setLevel(level)
    root.propagate = False
    _attach(root, logging.StreamHandler(), level)

    log_file = os.environ.get("LOG_FILE")
    if log_file:
        try:
            _attach(root, logging.FileHandler(log_file, encoding="utf-8"), level)
        except OSError as exc:
            root.warning(f"LOG_FILE {log_file!r} unusable ({exc}); logging to console only")
    return root


def get_logger(name: str) -> logging.Logger:
    """Return ``resale_inventory.<name>``; output goes through the package logger."""
    _package_logger()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
