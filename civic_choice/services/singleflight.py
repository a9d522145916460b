"""Per-key coalescing of concurrent cache misses."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, TypeVar

from ..metrics import metrics


log = logging.getLogger(__name__)

T = TypeVar("T")


class InFlightRequests:
    """Lets concurrent callers for the same key share one execution.

    The first caller for a key runs ``fn``; callers arriving while it is still
    running block on the same future and receive its result or exception.
    Once the call settles the key is released, so later callers start afresh.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: Dict[str, Future] = {}

    def run(self, key: str, fn: Callable[[], T]) -> T:
        with self._lock:
            future = self._calls.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._calls[key] = future

        if not leader:
            log.info("Joining in-flight request for %s", key)
            metrics.add_coalesced_wait()
            return future.result()

        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._calls.pop(key, None)

    def pending(self) -> int:
        with self._lock:
            return len(self._calls)
