"""
Content-addressed result cache.

Two kinds of results are cached for ten minutes:

* per-job heuristic scores, keyed by the résumé prefix and the job text
  (``rank:<sha256>``), shared by every caller;
* whole ranked responses, keyed by the résumé prefix and the sorted set
  of job URLs (``rank:resp:<sha256>``).

Reranked jobs are additionally written under ``rank:llm:<sha256>``.

The backing :class:`CacheStore` is pluggable: Redis when a connection
URL is configured, otherwise a bounded in-process LRU.  Expired entries
are never swept; Redis expires them itself and the in-process store
checks the TTL when an entry is read.

:class:`ResultCache` is the only thing the pipeline talks to.  It treats
every store operation as best effort: a store that is missing,
unreachable or failing only means the call goes uncached.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600
RESUME_KEY_CHARS = 2000
JOB_TEXT_KEY_CHARS = 2000
URL_KEY_CHARS = 8000
RERANK_RESUME_KEY_CHARS = 1000


def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def response_key(resume_text: str, job_urls: Iterable[str]) -> str:
    """Key of a whole ranked response for this résumé and job set."""
    urls = "|".join(sorted(u for u in job_urls if u))
    return "rank:resp:" + _sha256((resume_text or "")[:RESUME_KEY_CHARS] + "||" + urls[:URL_KEY_CHARS])


def job_score_key(resume_text: str, job_text: str) -> str:
    return "rank:" + _sha256((resume_text or "")[:RESUME_KEY_CHARS] + "||" + (job_text or "")[:JOB_TEXT_KEY_CHARS])


def rerank_key(url: str, resume_text: str) -> str:
    return "rank:llm:" + _sha256(url + (resume_text or "")[:RERANK_RESUME_KEY_CHARS])


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: str
    created_at: float
    ttl_seconds: int

    def expired(self, now: float) -> bool:
        return now >= self.created_at + self.ttl_seconds


class CacheStore(ABC):
    """Minimal key-value store with per-key expiry."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError


class NullCacheStore(CacheStore):
    """Caching disabled: every read misses, every write is dropped."""

    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        return None


class MemoryCacheStore(CacheStore):
    """In-process LRU store bounded to ``max_entries``.

    Expiry is checked on read; an expired entry is dropped when it is
    found, never by a background sweep.  Safe to share between threads.
    """

    def __init__(self, max_entries: int = 1024, clock: Callable[[], float] = time.time) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(self._clock()):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        entry = CacheEntry(key=key, value=value, created_at=self._clock(), ttl_seconds=ttl_seconds)
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisCacheStore(CacheStore):
    """Redis-backed store using ``GET`` / ``SETEX``."""

    def __init__(self, url: str, socket_timeout: float = 2.0) -> None:
        try:
            import redis  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "redis package is required for RedisCacheStore. Install it via pip."
            ) from exc
        self.client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            decode_responses=True,
        )

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.client.setex(key, ttl_seconds, value)


class ResultCache:
    """Best-effort JSON cache over a :class:`CacheStore`."""

    def __init__(self, store: Optional[CacheStore] = None, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self.store = store if store is not None else NullCacheStore()
        self.ttl_seconds = ttl_seconds
        self.enabled = not isinstance(self.store, NullCacheStore)
        self._stats: Dict[str, int] = {"hits": 0, "misses": 0, "writes": 0, "errors": 0}

    def get(self, key: str) -> Optional[object]:
        try:
            raw = self.store.get(key)
            value = json.loads(raw) if raw else None
        except Exception as exc:  # noqa: BLE001
            logger.warning("Cache read failed for %s: %s", key[:24], exc)
            self._stats["errors"] += 1
            return None
        self._stats["hits" if value is not None else "misses"] += 1
        return value

    def set(self, key: str, value: object, ttl_seconds: Optional[int] = None) -> None:
        if not self.enabled:
            return
        try:
            self.store.set(key, json.dumps(value), ttl_seconds or self.ttl_seconds)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Cache write failed for %s: %s", key[:24], exc)
            self._stats["errors"] += 1
            return
        self._stats["writes"] += 1

    def stats(self) -> Dict[str, object]:
        lookups = self._stats["hits"] + self._stats["misses"]
        return {
            **self._stats,
            "enabled": self.enabled,
            "hit_rate": round(self._stats["hits"] / lookups, 3) if lookups else 0.0,
            "backend": type(self.store).__name__,
        }


def build_cache_store(redis_url: Optional[str] = None, max_entries: int = 1024) -> CacheStore:
    """Redis when a URL is given and usable, otherwise an in-process LRU."""
    if redis_url:
        try:
            return RedisCacheStore(redis_url)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Redis cache unavailable (%s); using in-process cache", exc)
    return MemoryCacheStore(max_entries=max_entries)
