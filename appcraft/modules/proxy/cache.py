"""
Response Cache

In-memory store for successful GET responses.

Two independent expiry mechanisms:
- lookup() checks the caller's TTL and evicts stale entries (authoritative)
- a background sweep removes anything older than the retention window,
  which only bounds memory

The cache is an owned object: create one per process, call start() from a
running event loop to launch the sweep, and stop() on shutdown.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from appcraft.core.config import settings
from appcraft.core.logging_config import logger


@dataclass
class CacheEntry:
    key: str
    data: Any
    stored_at: int  # epoch milliseconds

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.stored_at


class ResponseCache:
    """
    Usage:
        cache = ResponseCache()
        cache.start()

        entry = cache.lookup(key, ttl_ms=300000)
        if entry is None:
            cache.store(key, data)

        await cache.stop()
    """

    def __init__(
        self,
        sweep_interval_ms: Optional[int] = None,
        retention_ms: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.sweep_interval_ms = (
            sweep_interval_ms if sweep_interval_ms is not None
            else settings.PROXY_CACHE_SWEEP_INTERVAL_MS
        )
        self.retention_ms = (
            retention_ms if retention_ms is not None
            else settings.PROXY_CACHE_RETENTION_MS
        )
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    # ==================== Lookup / Store ====================

    def lookup(self, key: str, ttl_ms: int) -> Optional[CacheEntry]:
        """Return the entry if younger than ttl_ms, otherwise evict it"""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.age_ms(self.now_ms()) < ttl_ms:
            logger.debug(f"Cache HIT: {key}")
            return entry

        del self._entries[key]
        logger.debug(f"Cache EXPIRED: {key}")
        return None

    def store(self, key: str, data: Any) -> CacheEntry:
        entry = CacheEntry(key=key, data=data, stored_at=self.now_ms())
        self._entries[key] = entry
        logger.debug(f"Cached response: {key}")
        return entry

    def invalidate(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        logger.info(f"Cleared {count} cached responses")
        return count

    # ==================== Housekeeping ====================

    def sweep(self) -> int:
        """Remove entries older than the retention window"""
        now = self.now_ms()
        expired_keys = [
            key for key, entry in self._entries.items()
            if entry.age_ms(now) > self.retention_ms
        ]
        for key in expired_keys:
            del self._entries[key]

        if expired_keys:
            logger.debug(f"Cache sweep removed {len(expired_keys)} entries")
        return len(expired_keys)

    @property
    def sweep_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        """Start background sweep task (needs a running event loop)"""
        if self.sweep_running:
            return

        async def sweep_loop():
            while True:
                await asyncio.sleep(self.sweep_interval_ms / 1000)
                try:
                    self.sweep()
                except Exception as e:
                    logger.error(f"Cache sweep error: {e}")

        self._sweep_task = asyncio.create_task(sweep_loop())
        logger.info(
            f"Started response cache sweep "
            f"(interval: {self.sweep_interval_ms}ms, retention: {self.retention_ms}ms)"
        )

    async def stop(self) -> None:
        """Stop background sweep task"""
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
            logger.info("Stopped response cache sweep")

    async def __aenter__(self) -> "ResponseCache":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    def stats(self) -> Dict[str, Any]:
        return {
            "entries": len(self._entries),
            "sweep_running": self.sweep_running,
            "sweep_interval_ms": self.sweep_interval_ms,
            "retention_ms": self.retention_ms,
        }
