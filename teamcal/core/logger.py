"""
Logging setup - one stdout handler for every "teamcal.*" logger.

Modules create their own named logger:
    logger = logging.getLogger("teamcal.routers.auth")
and configure_logging() is called once by the app factory.
"""

import logging
import sys
from typing import Optional

from teamcal.core.config import Settings


LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: Settings, level: Optional[str] = None) -> logging.Logger:
    """
    Attach a console handler to the "teamcal" logger.

    Safe to call more than once (tests build many apps); the handler
    is only added the first time.
    """
    logger = logging.getLogger("teamcal")

    resolved = level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
    logger.setLevel(resolved.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
