"""Rate limiting configuration."""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from teamcal.core.config import Settings


logger = logging.getLogger("teamcal.core.limiter")


def build_limiter(settings: Settings) -> Limiter:
    """
    Create a per-app limiter that applies RATE_LIMIT to every route
    not explicitly exempted (see teamcal.main).

    In-memory storage: limits are per process, which matches the
    single-process deployment.
    """
    limiter = Limiter(
        key_func=get_remote_address,
        storage_uri="memory://",
        default_limits=[settings.RATE_LIMIT],
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    logger.info(
        f"Rate limiter {'enabled' if settings.RATE_LIMIT_ENABLED else 'disabled'} ({settings.RATE_LIMIT})"
    )
    return limiter
