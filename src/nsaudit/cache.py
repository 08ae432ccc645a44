from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .models import normalize_host

logger = logging.getLogger(__name__)


class ResolverCache:
    """
    Parent zone -> first discovered name server, shared by all workers.

    All reads and writes of the map happen under one lock, and entries are
    stored as whole tuples, so a reader never observes a half-written entry.

    Entries live for the process unless `ttl` (seconds) is given, in which
    case an entry older than `ttl` is treated as a miss.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = float(ttl) if ttl is not None else None
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[str, float]] = {}
        # One lock per zone that is (or was) being resolved.
        self._inflight: Dict[str, threading.Lock] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, zone: str) -> bool:
        return self.get(zone) is not None

    def get(self, zone: str) -> Optional[str]:
        key = normalize_host(zone)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            host, stored_at = entry
            if self.ttl is not None and self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                return None
            return host

    def put(self, zone: str, host: str) -> None:
        key = normalize_host(zone)
        with self._lock:
            self._entries[key] = (host, self._clock())

    def get_or_resolve(self, zone: str, resolve: Callable[[str], str]) -> str:
        """
        Return the cached host for `zone`, calling `resolve(zone)` on a miss.

        Concurrent first-time misses for the same zone wait for a single call
        to `resolve`. If it raises, nothing is cached and the error propagates
        to that caller; the next caller tries again.
        """
        key = normalize_host(zone)
        host = self.get(key)
        if host is not None:
            logger.debug("Loaded parent NS for %s from cache", key)
            return host

        with self._lock:
            key_lock = self._inflight.setdefault(key, threading.Lock())

        with key_lock:
            host = self.get(key)
            if host is not None:
                logger.debug("Loaded parent NS for %s from cache", key)
                return host
            host = resolve(key)
            self.put(key, host)
            return host

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
