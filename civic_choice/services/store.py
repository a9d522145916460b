"""TTL-aware namespaced record persistence.

Records are JSON objects stamped with ``lastUpdated`` (epoch milliseconds) on
every write. Reads apply the freshness check themselves, so callers only ever
see records younger than the configured TTL. Writes never raise: a failure is
logged and reported through the returned ``WriteResult`` since every record
can be rebuilt from the research provider.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import redis

from .. import config
from ..errors import StoreWriteFailed
from .redis_client import get_client


log = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of ``PersistentStore.set``."""

    last_updated: int
    error: Optional[StoreWriteFailed] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PersistentStore:
    """Base class holding the TTL logic shared by every backend."""

    def __init__(self, ttl_ms: Optional[int] = None, clock: Optional[Clock] = None) -> None:
        self._ttl_ms = config.cache_ttl_ms() if ttl_ms is None else ttl_ms
        self._clock = clock or now_ms

    def now(self) -> int:
        return self._clock()

    def get(self, namespace: str, key: str) -> Optional[dict[str, Any]]:
        record = self._read(namespace, key)
        if record is None:
            return None
        if not self.is_fresh(record):
            log.info("Cache expired for %s/%s", namespace, key)
            return None
        return record

    def set(self, namespace: str, key: str, record: dict[str, Any]) -> WriteResult:
        stamped = dict(record)
        stamped["lastUpdated"] = self.now()
        try:
            self._write(namespace, key, stamped)
        except StoreWriteFailed as exc:
            log.warning("Failed to persist %s/%s: %s", namespace, key, exc)
            return WriteResult(last_updated=stamped["lastUpdated"], error=exc)
        return WriteResult(last_updated=stamped["lastUpdated"])

    def clear(self, namespace: str) -> None:
        raise NotImplementedError

    def is_fresh(self, record: dict[str, Any]) -> bool:
        stamp = record.get("lastUpdated")
        if isinstance(stamp, bool) or not isinstance(stamp, (int, float)):
            return False
        return self.now() - stamp < self._ttl_ms

    # ------------------------------------------------------------------
    # Backend hooks

    def _read(self, namespace: str, key: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def _write(self, namespace: str, key: str, record: dict[str, Any]) -> None:
        """Persist ``record``; raise ``StoreWriteFailed`` on any medium error."""

        raise NotImplementedError


class RedisStore(PersistentStore):
    """Stores each record as a JSON string under ``<prefix>:<namespace>:<key>``."""

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        *,
        prefix: Optional[str] = None,
        ttl_ms: Optional[int] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(ttl_ms=ttl_ms, clock=clock)
        self._redis = client if client is not None else get_client()
        self._prefix = prefix or config.REDIS_KEY_PREFIX

    def _key(self, namespace: str, key: str) -> str:
        return f"{self._prefix}:{namespace}:{key}"

    def _read(self, namespace: str, key: str) -> Optional[dict[str, Any]]:
        try:
            raw = self._redis.get(self._key(namespace, key))
        except redis.RedisError as exc:
            log.error("Failed to read %s/%s from Redis: %s", namespace, key, exc)
            return None
        if not raw:
            return None
        try:
            record = json.loads(raw)
        except json.JSONDecodeError:
            log.warning("Discarding unreadable record %s/%s", namespace, key)
            return None
        return record if isinstance(record, dict) else None

    def _write(self, namespace: str, key: str, record: dict[str, Any]) -> None:
        ttl_seconds = max(1, -(-self._ttl_ms // 1000))
        try:
            self._redis.setex(self._key(namespace, key), ttl_seconds, json.dumps(record))
        except (redis.RedisError, TypeError, ValueError) as exc:
            raise StoreWriteFailed(str(exc)) from exc

    def clear(self, namespace: str) -> None:
        try:
            for redis_key in list(self._redis.scan_iter(match=f"{self._prefix}:{namespace}:*")):
                self._redis.delete(redis_key)
        except redis.RedisError as exc:
            log.error("Failed to clear %s from Redis: %s", namespace, exc)
            raise StoreWriteFailed(f"Could not clear {namespace}: {exc}") from exc


class JsonFileStore(PersistentStore):
    """Keeps one JSON document per namespace inside ``directory``.

    Each document maps keys to records, the same layout a browser's local
    storage database would use. Files are replaced atomically so readers never
    observe a half-written document.
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        *,
        ttl_ms: Optional[int] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(ttl_ms=ttl_ms, clock=clock)
        self._directory = Path(directory) if directory is not None else config.STORE_DIRECTORY
        self._lock = threading.Lock()

    def _path(self, namespace: str) -> Path:
        return self._directory / f"{namespace}.json"

    def _load(self, namespace: str) -> Dict[str, Any]:
        try:
            with self._path(namespace).open("r", encoding="utf-8") as fh:
                records = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("Discarding unreadable namespace %s: %s", namespace, exc)
            return {}
        return records if isinstance(records, dict) else {}

    def _read(self, namespace: str, key: str) -> Optional[dict[str, Any]]:
        with self._lock:
            record = self._load(namespace).get(key)
        return record if isinstance(record, dict) else None

    def _write(self, namespace: str, key: str, record: dict[str, Any]) -> None:
        with self._lock:
            records = self._load(namespace)
            records[key] = record
            try:
                self._directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        json.dump(records, fh, indent=4)
                    os.replace(tmp_name, self._path(namespace))
                except BaseException:
                    if os.path.exists(tmp_name):
                        os.unlink(tmp_name)
                    raise
            except (OSError, TypeError, ValueError) as exc:
                raise StoreWriteFailed(str(exc)) from exc

    def clear(self, namespace: str) -> None:
        with self._lock:
            try:
                self._path(namespace).unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                log.error("Failed to clear %s: %s", namespace, exc)
                raise StoreWriteFailed(f"Could not clear {namespace}: {exc}") from exc


def build_store(backend: Optional[str] = None) -> PersistentStore:
    """Instantiate the configured store backend."""

    backend = (backend or config.STORE_BACKEND).lower()
    if backend == "redis":
        return RedisStore()
    if backend == "file":
        return JsonFileStore()
    raise ValueError(f"Unsupported store backend: {backend}")
