"""
Keyed cache for backend reads, plus retry policy for reads and mutations.

Reads are keyed by tuples such as ("stores", "detail", store_id).
    - Fresh for stale_seconds; after that the next read refetches.
    - Evicted once unused for gc_seconds.
    - Concurrent reads of the same key share one backend call.
    - Failed reads retry with exponential backoff (retryable errors only).

Mutations never touch cached entries directly; callers invalidate the
keys a successful mutation affected so the next read refetches.
"""

import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

import structlog

from exceptions import AppError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

QueryKey = tuple


@dataclass
class _Entry:
    data: Any
    updated_at: float
    last_used_at: float
    invalidated: bool = False


class QueryCache:
    """
    Read cache with in-flight de-duplication.

    Args:
        stale_seconds: Freshness window of a cached read
        gc_seconds: Unused entries older than this are dropped
        retry: Retries for a failed read
        retry_base_delay: First read retry delay; doubles per attempt
        retry_max_delay: Cap for read retry delay
        mutation_retry: Retries for a failed mutation
        mutation_retry_delay: Fixed delay between mutation retries
        clock: Monotonic time source (seconds)
        sleep: Sleep function used between retries
    """

    def __init__(
        self,
        stale_seconds: float = 300,
        gc_seconds: float = 600,
        retry: int = 2,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 30.0,
        mutation_retry: int = 1,
        mutation_retry_delay: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.stale_seconds = stale_seconds
        self.gc_seconds = gc_seconds
        self.retry = retry
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self.mutation_retry = mutation_retry
        self.mutation_retry_delay = mutation_retry_delay
        self.clock = clock
        self.sleep = sleep

        self._entries: dict[QueryKey, _Entry] = {}
        self._in_flight: dict[QueryKey, Future] = {}
        self._generations: dict[QueryKey, int] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings, **overrides) -> "QueryCache":
        options = dict(
            stale_seconds=settings.query_stale_seconds,
            gc_seconds=settings.query_gc_seconds,
            retry=settings.query_retry,
            retry_base_delay=settings.query_retry_base_delay_seconds,
            retry_max_delay=settings.query_retry_max_delay_seconds,
            mutation_retry=settings.mutation_retry,
            mutation_retry_delay=settings.mutation_retry_delay_seconds,
        )
        options.update(overrides)
        return cls(**options)

    # ===================
    # READS
    # ===================

    def fetch(self, key: QueryKey, fetcher: Callable[[], T]) -> T:
        """
        Cached read.

        Args:
            key: Query key tuple
            fetcher: Performs the backend read on a miss

        Returns:
            Cached or freshly fetched data

        Raises:
            AppError: Whatever the fetcher raised after retries
        """
        key = tuple(key)
        now = self.clock()

        with self._lock:
            self._collect_garbage(now)
            entry = self._entries.get(key)
            if entry is not None and not self._is_stale(entry, now):
                entry.last_used_at = now
                logger.debug("query_cache_hit", key=key)
                return entry.data

            future = self._in_flight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._in_flight[key] = future
                generation = self._generations.get(key, 0)

        if not owner:
            logger.debug("query_joined_in_flight", key=key)
            return future.result()

        try:
            data = self._with_retry(fetcher, key)
        except Exception as e:
            with self._lock:
                self._release(key, future)
            future.set_exception(e)
            raise

        fetched_at = self.clock()
        with self._lock:
            # Invalidated while fetching: data may predate a mutation, so it is not kept.
            superseded = self._generations.get(key, 0) != generation
            if not superseded:
                self._entries[key] = _Entry(data=data, updated_at=fetched_at, last_used_at=fetched_at)
            self._release(key, future)
        future.set_result(data)

        if superseded:
            logger.info("query_fetched_superseded", key=key)
        else:
            logger.debug("query_fetched", key=key)
        return data

    def get_query_data(self, key: QueryKey) -> Optional[Any]:
        """Cached data for a key, fresh or not, without fetching."""
        entry = self._entries.get(tuple(key))
        return entry.data if entry else None

    def is_stale(self, key: QueryKey) -> bool:
        """True when the next fetch of this key would go to the backend."""
        entry = self._entries.get(tuple(key))
        return entry is None or self._is_stale(entry, self.clock())

    def invalidate(self, prefix: QueryKey) -> int:
        """
        Mark every entry whose key starts with prefix as stale.

        Reads of matching keys still in flight are detached: their result
        is returned to their callers but not cached, and later readers
        start a new fetch instead of joining them.

        Returns:
            Number of entries invalidated
        """
        prefix = tuple(prefix)
        with self._lock:
            matching = {
                key for key in list(self._entries) + list(self._in_flight)
                if key[:len(prefix)] == prefix
            }
            in_flight = sum(1 for key in matching if key in self._in_flight)
            for key in matching:
                self._generations[key] = self._generations.get(key, 0) + 1
                self._in_flight.pop(key, None)
                entry = self._entries.get(key)
                if entry is not None:
                    entry.invalidated = True
            count = sum(1 for key in matching if key in self._entries)

        logger.info("query_invalidated", prefix=prefix, entries=count, in_flight=in_flight)
        return count

    def clear(self) -> None:
        with self._lock:
            for key in list(self._entries) + list(self._in_flight):
                self._generations[key] = self._generations.get(key, 0) + 1
            self._entries.clear()
            self._in_flight.clear()
        logger.info("query_cache_cleared")

    # ===================
    # MUTATIONS
    # ===================

    def mutate(self, name: str, mutation: Callable[[], T]) -> T:
        """
        Run a mutation with the mutation retry policy.

        The cache itself is not touched; invalidation is the caller's job
        once the mutation has succeeded.
        """
        attempt = 0
        while True:
            try:
                return mutation()
            except AppError as e:
                if attempt >= self.mutation_retry or not _is_retryable(e):
                    raise
                attempt += 1
                logger.warning(
                    "mutation_retry",
                    mutation=name,
                    attempt=attempt,
                    delay=self.mutation_retry_delay,
                    error=e.message
                )
                self.sleep(self.mutation_retry_delay)

    # ===================
    # HELPERS
    # ===================

    def retry_delay(self, attempt: int) -> float:
        """Backoff before read retry number attempt (0-based)."""
        return min(self.retry_base_delay * (2 ** attempt), self.retry_max_delay)

    def _with_retry(self, fetcher: Callable[[], T], key: QueryKey) -> T:
        attempt = 0
        while True:
            try:
                return fetcher()
            except AppError as e:
                if attempt >= self.retry or not _is_retryable(e):
                    raise
                delay = self.retry_delay(attempt)
                attempt += 1
                logger.warning(
                    "query_retry",
                    key=key,
                    attempt=attempt,
                    delay=delay,
                    error=e.message
                )
                self.sleep(delay)

    def _release(self, key: QueryKey, future: Future) -> None:
        if self._in_flight.get(key) is future:
            del self._in_flight[key]

    def _is_stale(self, entry: _Entry, now: float) -> bool:
        return entry.invalidated or now - entry.updated_at >= self.stale_seconds

    def _collect_garbage(self, now: float) -> None:
        expired = [
            key for key, entry in self._entries.items()
            if now - entry.last_used_at > self.gc_seconds and key not in self._in_flight
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("query_cache_gc", evicted=len(expired))


def _is_retryable(error: AppError) -> bool:
    return bool(getattr(error, "retryable", False))
