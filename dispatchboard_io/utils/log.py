"""Logging helpers for the dispatchboard_io package."""

# Module responsibilities:
# - Hand out loggers namespaced under the application logger so records reach
#   its rotating file + console handlers once the application configured them.
# - Stay import-light: reading and mapping spreadsheets never configures logging.

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = "dispatchboard"


def get_logger(name: str) -> logging.Logger:
    """Return a package-scoped logger.

    Args:
        name: Logger name suffix appended to ``dispatchboard.io``.

    Returns:
        Logger propagating to the application logger.
    """

    return logging.getLogger(f"{ROOT_LOGGER_NAME}.io.{name}")
