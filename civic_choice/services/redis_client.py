"""Lazily created, process-wide Redis connection for the record store."""

from __future__ import annotations

import threading
from typing import Optional

import redis

from .. import config

_client: Optional[redis.Redis] = None
_lock = threading.Lock()


def get_client() -> redis.Redis:
    """Return the shared client, connecting on first use."""

    global _client
    if _client is None:
        with _lock:
            if _client is None:
                _client = redis.Redis.from_url(
                    config.REDIS_URL,
                    decode_responses=True,
                    socket_timeout=config.REDIS_SOCKET_TIMEOUT,
                )
    return _client


def reset_client() -> None:
    """Drop the shared client so the next caller reconnects with current config."""

    global _client
    with _lock:
        if _client is not None:
            _client.close()
        _client = None
