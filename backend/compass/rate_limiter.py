"""
Rate Limiter Configuration

Centralized rate limiter instance for use across all API endpoints.
Prevents circular imports between main.py and API route files.
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from compass.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Redis keeps limits shared across workers; otherwise each process counts alone
storage_uri = settings.redis_url or "memory://"
if not settings.redis_url:
    logger.debug("Rate limiter using in-memory storage")

# Uses client IP for rate limiting
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    storage_uri=storage_uri,
    strategy="fixed-window",
)
