"""Logging setup for the onboarding service.

Modules log through ``get_logger(__name__)``. The entry points (the FastAPI
app and ``python -m newhire``) call ``configure_logging`` once; the configured
level applies to the ``newhire`` loggers, while chatty libraries are held at
the levels in ``LIBRARY_LEVELS``.
"""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "newhire"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# httpx logs every backend request at INFO
LIBRARY_LEVELS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(level: Optional[int] = None) -> None:
    """Install the stderr handler and apply the service log level.

    Args:
        level: Level for the ``newhire`` loggers. Defaults to NEWHIRE_LOG_LEVEL.
    """
    if level is None:
        from newhire.config import get_settings

        level = get_settings().log_level_int

    logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, stream=sys.stderr)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    for name, library_level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)
