"""Logging setup shared by the CLI and the GUI."""

from __future__ import annotations

import logging

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level_name: str | None) -> int:
    """
    Configure root logging.

    Parameters
    ----------
    level_name:
        Level name such as "DEBUG" or "info". None or empty means INFO.

    Returns
    -------
    int
        The numeric level that was applied.
    """
    if not level_name:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, force=True)
        return logging.INFO

    numeric_level = getattr(logging, level_name.strip().upper(), None)
    if not isinstance(numeric_level, int):
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, force=True)
        LOGGER.warning("Invalid log level: %s, using INFO", level_name)
        return logging.INFO

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, force=True)
    return numeric_level
