"""Shared fixtures for the CivicChoice test-suite."""

from __future__ import annotations

import fnmatch
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

import pytest

# Ensure the application package is importable.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from civic_choice.metrics import metrics
from civic_choice.services.store import RedisStore

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS
START_MS = 1_700_000_000_000


@dataclass
class FakeRedis:
    strings: Dict[str, str] = field(default_factory=dict)
    ttls: Dict[str, int] = field(default_factory=dict)
    setex_calls: List[str] = field(default_factory=list)

    def get(self, key: str) -> str | None:
        return self.strings.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self.setex_calls.append(key)
        self.strings[key] = value
        self.ttls[key] = ttl

    def delete(self, key: str) -> None:
        self.strings.pop(key, None)
        self.ttls.pop(key, None)

    def scan_iter(self, match: str = "*") -> Iterator[str]:
        for key in list(self.strings):
            if fnmatch.fnmatchcase(key, match):
                yield key


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(fake_redis, clock) -> RedisStore:
    return RedisStore(fake_redis, clock=clock)
