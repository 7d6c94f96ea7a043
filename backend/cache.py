import logging
import threading
import time

from config import CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


def room_allocations_key(school_id):
    return f"room-allocations:{school_id}"


class ResponseCache:
    """Small in-process TTL cache for listing responses."""

    def __init__(self, ttl=CACHE_TTL_SECONDS, clock=time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key, value, ttl=None):
        with self._lock:
            self._entries[key] = (self._clock() + (ttl or self.ttl), value)

    def delete(self, key):
        with self._lock:
            self._entries.pop(key, None)

    def clear(self):
        with self._lock:
            self._entries.clear()


def invalidate(cache, school_id):
    """Drop the school's cached room listing; a failure is logged, not raised."""
    key = room_allocations_key(school_id)
    try:
        cache.delete(key)
    except Exception:
        logger.warning("Cache invalidation failed for %s", key, exc_info=True)


response_cache = ResponseCache()


def get_cache():
    return response_cache
