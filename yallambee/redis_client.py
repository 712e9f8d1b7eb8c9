# Redis client helper: opt-in, fail-open access to a shared Redis connection.
# Controlled by REDIS_ENABLED and REDIS_URL; only the cross-process booking lock depends on it.
import logging
import os

from .config import truthy

_logger = logging.getLogger("yallambee.redis")


def is_redis_enabled() -> bool:
    return truthy(os.getenv("REDIS_ENABLED", "false"))


# Cached client and a one-shot initialization guard; a failed connect stays failed for the process
_client = None
_initialized = False


def get_redis():
    """
    Return a Redis client if enabled and reachable; otherwise return None.

    - Lazy initialization on first call
    - Fail-open on errors, so booking writes fall back to in-process locking only
    - After a failed attempt in this process, subsequent calls also return None
    """
    global _client, _initialized
    if not is_redis_enabled():
        return None
    if _client is not None:
        return _client
    if _initialized:
        return None

    url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    try:
        import redis

        client = redis.Redis.from_url(
            url,
            socket_timeout=0.25,
            socket_connect_timeout=0.25,
            retry_on_timeout=False,
            health_check_interval=0,
        )
        client.ping()
        _client = client
        _initialized = True
        _logger.info("Connected to Redis at %s", url)
        return _client
    except Exception as exc:
        _logger.warning("Redis unavailable (fail-open): %s", exc)
        _client = None
        _initialized = True
        return None

