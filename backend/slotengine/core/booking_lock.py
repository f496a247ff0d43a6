"""
Advisory booking lock keyed by (host, UTC date).

Narrows the check-then-insert race for one host's day across processes.
At-most-one-winner is still decided by the database (host row lock and the
partial unique index), so the lock fails open when Redis is unreachable.

Each acquisition stores a random token; release deletes the key only while
it still holds that token, so a request whose lock expired cannot free a
lock taken since by someone else.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
import logging
import threading
from typing import Iterator, Optional
import uuid

from redis import Redis

from slotengine.core.config import settings
from slotengine.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

# Compare-and-delete
_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""

_client: Optional[Redis] = None
_client_guard = threading.Lock()


@dataclass(frozen=True)
class LockHandle:
    """Outcome of an acquisition attempt. token is None when nothing is held in Redis."""

    key: str
    acquired: bool
    token: Optional[str] = None


def lock_key(host_id: str, lock_date: date) -> str:
    return f"{settings.lock_namespace}:lock:booking:{host_id}:{lock_date.isoformat()}:mutex"


def _get_sync_redis() -> Optional[Redis]:
    """Shared client, created on first use. None if Redis does not answer a ping."""
    global _client
    with _client_guard:
        if _client is None:
            candidate = Redis.from_url(settings.redis_url, decode_responses=True)
            try:
                candidate.ping()
            except Exception as exc:
                logger.warning("Redis unavailable for booking locks: %s", exc)
                return None
            _client = candidate
    return _client


def acquire_booking_lock(
    host_id: str, lock_date: date, ttl_s: Optional[int] = None
) -> LockHandle:
    """
    Try once to take the (host, date) lock with SET NX EX.

    Never blocks. Redis errors are logged and treated as acquired.
    """
    key = lock_key(host_id, lock_date)
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_booking_lock("acquire", "redis_unavailable")
        return LockHandle(key=key, acquired=True)

    token = uuid.uuid4().hex
    ttl = ttl_s if ttl_s is not None else settings.booking_lock_ttl_seconds
    try:
        taken = bool(client.set(key, token, nx=True, ex=ttl))
    except Exception as exc:
        prometheus_metrics.record_booking_lock("acquire", "error")
        logger.warning("Booking lock acquire failed for %s: %s", key, exc)
        return LockHandle(key=key, acquired=True)

    prometheus_metrics.record_booking_lock("acquire", "success" if taken else "blocked")
    if not taken:
        logger.info("Booking lock %s is held by another request", key)
        return LockHandle(key=key, acquired=False)
    return LockHandle(key=key, acquired=True, token=token)


def release_booking_lock(handle: LockHandle) -> None:
    if handle.token is None:
        return
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_booking_lock("release", "redis_unavailable")
        return
    try:
        released = client.eval(_RELEASE_SCRIPT, 1, handle.key, handle.token)
    except Exception as exc:
        prometheus_metrics.record_booking_lock("release", "error")
        logger.warning("Booking lock release failed for %s: %s", handle.key, exc)
        return
    prometheus_metrics.record_booking_lock("release", "success" if released else "expired")


@contextmanager
def booking_lock(host_id: str, lock_date: date, ttl_s: Optional[int] = None) -> Iterator[bool]:
    """
    Hold the (host, date) lock for the duration of the block.

    Yields False only when another request holds the lock. Yields True
    without touching Redis when ``settings.booking_lock_enabled`` is off.
    """
    if not settings.booking_lock_enabled:
        yield True
        return

    handle = acquire_booking_lock(host_id, lock_date, ttl_s=ttl_s)
    try:
        yield handle.acquired
    finally:
        release_booking_lock(handle)
