# Per-property write guards for the booking check-then-insert sequence.
# An in-process lock serializes threads of this worker; a Redis lock (fail-open) covers other processes.
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator
from uuid import uuid4

from .config import booking_lock_ttl_ms
from .redis_client import get_redis

logger = logging.getLogger("yallambee.locks")

_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""

# One lock per property ever written; never pruned, bounded by the number of properties
_local_locks: Dict[int, threading.Lock] = {}
_local_locks_guard = threading.Lock()


def _local_lock(property_id: int) -> threading.Lock:
    with _local_locks_guard:
        lock = _local_locks.get(property_id)
        if lock is None:
            lock = threading.Lock()
            _local_locks[property_id] = lock
        return lock


@contextmanager
def redis_try_lock(key: str, ttl_ms: int = 5000) -> Iterator[bool]:
    """
    Best-effort distributed lock implemented with Redis SET NX PX.

    Yields:
    - True when the lock is acquired, or when Redis is unavailable (fail-open).
    - False when another process holds the lock.

    Release uses a token-checked Lua script so we never delete a lock we don't own.
    """
    r = get_redis()
    if r is None:
        yield True
        return

    token = uuid4().hex
    acquired = False
    try:
        acquired = bool(r.set(key, token, nx=True, px=ttl_ms))
    except Exception as exc:
        logger.warning("redis_try_lock error (key=%s): %s", key, exc)
        yield True
        return

    try:
        yield acquired
    finally:
        if acquired:
            try:
                r.eval(_RELEASE_SCRIPT, 1, key, token)
            except Exception as exc:
                # The lock will expire by TTL
                logger.debug("redis_try_lock release error (key=%s): %s", key, exc)


@contextmanager
def property_guard(property_id: int) -> Iterator[bool]:
    """
    Serialize booking writes for one property.

    Blocks on the in-process lock for `property_id`, then tries the shared Redis
    lock. Yields False if another process holds the Redis lock; callers should
    report the property as busy rather than writing.

        with property_guard(pid) as locked:
            if not locked:
                raise BusyError()
            # check overlap, insert, commit
    """
    with _local_lock(property_id):
        with redis_try_lock(f"lock:booking:property:{property_id}", ttl_ms=booking_lock_ttl_ms()) as locked:
            yield locked
