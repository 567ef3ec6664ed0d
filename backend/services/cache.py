"""Simple in-memory TTL cache. No Redis needed for this scale.

Entries expire lazily on read and are also removed by a periodic sweep so
keys that are never read again do not accumulate.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
the full character listing may be fetched twice (once per worker). Nothing
survives a restart.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class TTLCache:
    def __init__(
        self,
        default_ttl: float = 3600,
        sweep_interval: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweep_task: asyncio.Task | None = None

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                logger.debug("Cache MISS: %s", key)
                return None
            if entry.is_expired(self._clock()):
                del self._store[key]
                logger.debug("Cache EXPIRED: %s", key)
                return None
        logger.debug("Cache HIT: %s", key)
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._store[key] = CacheEntry(value=value, stored_at=self._clock(), ttl=ttl)
        logger.debug("Cache SET: %s (ttl=%ss)", key, ttl)

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._store[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            removed = self._store.pop(key, None) is not None
        if removed:
            logger.debug("Cache DELETE: %s", key)
        return removed

    def clear(self) -> None:
        with self._lock:
            size = len(self._store)
            self._store.clear()
        logger.info("Cache CLEARED: %d items removed", size)

    def sweep(self) -> int:
        """Delete every expired entry. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._store.items() if entry.is_expired(now)]
            for key in expired:
                del self._store[key]
        if expired:
            logger.info("Cache sweep: %d expired items removed", len(expired))
        return len(expired)

    def stats(self) -> dict:
        with self._lock:
            return {"size": len(self._store), "keys": list(self._store)}

    def start(self) -> None:
        """Start the background sweep. Must be called from a running event loop."""
        if self._sweep_task is not None and not self._sweep_task.done():
            logger.warning("Cache sweeper already running")
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info("Cache sweeper started (interval=%ss)", self.sweep_interval)

    async def shutdown(self) -> None:
        """Stop the background sweep and drop all entries."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
        self.clear()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()
