"""Thread-safe metrics collectors shared across the CivicChoice services."""

from __future__ import annotations

import threading


class AppMetrics:
    """Track cache effectiveness and cumulative provider timings."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.cache_hits = 0
            self.cache_misses = 0
            self.provider_calls = 0
            self.provider_time = 0.0
            self.coalesced_waits = 0
            self.store_write_failures = 0

    def add_cache_hit(self) -> None:
        with self._lock:
            self.cache_hits += 1

    def add_cache_miss(self) -> None:
        with self._lock:
            self.cache_misses += 1

    def add_provider_call(self, duration: float) -> None:
        with self._lock:
            self.provider_calls += 1
            self.provider_time += duration

    def add_coalesced_wait(self) -> None:
        with self._lock:
            self.coalesced_waits += 1

    def add_store_write_failure(self) -> None:
        with self._lock:
            self.store_write_failures += 1

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            return {
                "cache_hits": self.cache_hits,
                "cache_misses": self.cache_misses,
                "provider_calls": self.provider_calls,
                "provider_time": self.provider_time,
                "coalesced_waits": self.coalesced_waits,
                "store_write_failures": self.store_write_failures,
            }


metrics = AppMetrics()
