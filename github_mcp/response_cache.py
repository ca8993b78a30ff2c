# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Response Cache

Maps a backend request fingerprint to the backend's response for a fixed
time-to-live. Bounded: least recently used entries are evicted once
max_entries is reached, stale entries are dropped when read, and a
background task sweeps the rest.
"""

import asyncio
import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0
DEFAULT_MAX_ENTRIES = 1024

# Absent-key default for get(); None is a valid cached payload (JSON null)
MISSING: Any = object()


def fingerprint(endpoint: str, method: str = "GET", body: Optional[Any] = None) -> str:
    """
    Deterministic cache key for a backend request.

    Headers never participate, so credentials cannot split or share entries.

    Args:
        endpoint: Path plus query string
        method: HTTP method (case-insensitive)
        body: JSON-serializable request body

    Returns:
        Hex SHA-256 digest of the canonical request
    """
    canonical = json.dumps(
        {"endpoint": endpoint, "method": method.upper(), "body": body},
        sort_keys=True,
        separators=(",", ":"),
        default=str
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass
class CacheEntry:
    """Cached backend payload"""
    key: str
    value: Any
    stored_at: float


class ResponseCache:
    """TTL cache with LRU eviction"""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._sweeper_task: Optional[asyncio.Task] = None

        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at < self.ttl_seconds

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return the cached value, or default when absent or stale.

        Stale entries are never surfaced; they are removed on read.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return default

            if not self._is_fresh(entry, self._clock()):
                del self._entries[key]
                self.misses += 1
                return default

            self._entries.move_to_end(key)
            self.hits += 1
            return entry.value

    def put(self, key: str, value: Any) -> None:
        """Store value under key, overwriting any previous entry and restarting its TTL"""
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())
            self._entries.move_to_end(key)

            while len(self._entries) > self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                self.evictions += 1
                logger.debug(f"Evicted cache entry {evicted_key[:12]}")

    def sweep(self) -> int:
        """
        Remove every stale entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._entries.items() if not self._is_fresh(entry, now)]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict:
        return {
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions
        }

    # ===== BACKGROUND SWEEP =====

    async def _sweep_periodically(self, interval: float):
        """Periodically drop expired entries"""
        while True:
            await asyncio.sleep(interval)
            removed = self.sweep()
            if removed:
                logger.info(f"Swept {removed} expired cache entries")

    def start_sweeper(self, interval: float) -> asyncio.Task:
        """Start the background sweep task (requires a running event loop)"""
        if self._sweeper_task is None or self._sweeper_task.done():
            self._sweeper_task = asyncio.create_task(self._sweep_periodically(interval))
        return self._sweeper_task

    async def stop_sweeper(self) -> None:
        if self._sweeper_task is None:
            return
        self._sweeper_task.cancel()
        try:
            await self._sweeper_task
        except asyncio.CancelledError:
            pass
        self._sweeper_task = None
