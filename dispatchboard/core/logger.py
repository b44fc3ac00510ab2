from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys


LOGGER_NAME = "dispatchboard"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOGGER: logging.Logger | None = None


def _default_log_dir() -> Path:
    from dispatchboard_persist.utils.paths import ensure_structure

    return ensure_structure()["logs"]


def _build(log_dir: Path) -> logging.Logger:
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [
        RotatingFileHandler(log_dir / "app.log", maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"),
        logging.StreamHandler(sys.stdout),
    ]
    for handler in handlers:
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    return logger


def get_logger(log_dir: Path | None = None, *, level: int | None = None) -> logging.Logger:
    """Return the board logger writing to <data root>/logs/app.log and stdout.

    The first call decides the log directory for the rest of the process;
    *level*, when given, is applied on every call.
    """
    global _LOGGER
    if _LOGGER is None:
        _LOGGER = _build(Path(log_dir) if log_dir is not None else _default_log_dir())
    if level is not None:
        _LOGGER.setLevel(level)
    return _LOGGER
