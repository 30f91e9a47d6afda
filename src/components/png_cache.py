"""In-memory PNG cache for countdown images.

Email clients often fetch the same image several times within a few seconds;
caching the rasterized bytes for a short TTL avoids repeated rasterization.
The cache never affects correctness: a miss always falls through to a full
render.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple
from urllib.parse import urlencode

log = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5.0
DEFAULT_MAX_ENTRIES = 1000


@dataclass
class CacheEntry:
    key: str
    buffer: bytes
    created_at: float


def build_cache_key(params: Iterable[Tuple[str, str]]) -> str:
    """Canonical query string: parameters sorted by name, then URL-encoded.

    The sort is stable so repeated names keep their relative order.
    """
    return urlencode(sorted(params, key=lambda item: item[0]))


class PngCache:
    """Bounded TTL cache keyed by canonical query string.

    Entries are stored in creation order, so the oldest entry is always first
    and capacity eviction does not need to scan the store.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, max_entries: int = DEFAULT_MAX_ENTRIES,
                 clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Optional[bytes]:
        """Return the cached buffer if it is younger than the TTL."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at < self.ttl_seconds:
                return entry.buffer
            return None

    def put(self, key: str, buffer: bytes) -> None:
        """Insert or overwrite key, evicting the oldest entry when full."""
        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                log.debug(f"PNG cache full ({self.max_entries}), evicted oldest entry {evicted_key[:80]}")
            self._entries[key] = CacheEntry(key=key, buffer=buffer, created_at=now)

    def sweep(self) -> int:
        """Remove every entry whose age has reached the TTL."""
        with self._lock:
            now = self._clock()
            stale_keys = [key for key, entry in self._entries.items()
                          if now - entry.created_at >= self.ttl_seconds]
            for key in stale_keys:
                del self._entries[key]
        if stale_keys:
            log.debug(f"PNG cache sweep removed {len(stale_keys)} stale entries")
        return len(stale_keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> Dict[str, float]:
        with self._lock:
            size = len(self._entries)
        return {
            "size": size,
            "max_size": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
        }

    def start_sweeper(self, interval: Optional[float] = None) -> "CacheSweeper":
        """Start a background sweep every interval seconds (default: the TTL)."""
        sweeper = CacheSweeper(self, interval if interval is not None else self.ttl_seconds)
        sweeper.start()
        return sweeper


class CacheSweeper:
    """Background thread that periodically sweeps a PngCache until stopped."""

    def __init__(self, cache: PngCache, interval: float):
        self.cache = cache
        self.interval = interval
        self.sweep_thread = None
        self.stop_sweep = threading.Event()

    def start(self):
        """Start the sweep thread"""
        if self.sweep_thread and self.sweep_thread.is_alive():
            return

        self.stop_sweep.clear()
        self.sweep_thread = threading.Thread(target=self._sweep_loop, name="png-cache-sweeper")
        self.sweep_thread.daemon = True
        self.sweep_thread.start()
        log.info(f"PNG cache sweeper started (every {self.interval}s)")

    def _sweep_loop(self):
        while not self.stop_sweep.is_set():
            self.stop_sweep.wait(self.interval)

            if not self.stop_sweep.is_set():
                try:
                    self.cache.sweep()
                except Exception as e:
                    log.warning(f"PNG cache sweep failed: {e}", exc_info=True)

    @property
    def is_running(self) -> bool:
        return bool(self.sweep_thread and self.sweep_thread.is_alive())

    def stop(self):
        """Stop the sweep thread"""
        self.stop_sweep.set()
        if self.sweep_thread:
            self.sweep_thread.join(timeout=1.0)
        log.info("PNG cache sweeper stopped")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
