"""
Rate limiting configuration for the Copy Resources service
"""
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os

# Copies write many rows per request; keep them well below the default limits.
DEFAULT_COPY_LIMIT = "30 per minute"


def get_limiter_storage_uri():
    """
    Get storage URI for rate limiter
    Uses Redis in production, memory in development
    """
    redis_url = os.environ.get('REDIS_URL')
    if redis_url:
        return redis_url
    return "memory://"


def copy_limit():
    """Limit applied to each copy endpoint (COPY_RESOURCES_RATE_LIMIT)"""
    return os.environ.get('COPY_RESOURCES_RATE_LIMIT', DEFAULT_COPY_LIMIT)


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=get_limiter_storage_uri(),
    default_limits=["1000 per hour", "100 per minute"],
    strategy="fixed-window",
)


def init_limiter(app):
    """Initialize rate limiter with Flask app"""
    limiter.init_app(app)
    return limiter
