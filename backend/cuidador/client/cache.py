"""Patient-qualified query cache and its invalidator.

Query keys are tuples whose first element is the category (the API path,
e.g. ``/api/medications``) and whose second element is the effective patient
id the data belongs to. Qualifying keys by patient means a request issued
under a previous context can only ever write into that patient's slot, which
is never read again under the new context. Invalidation on a context switch
narrows the window further; it is not what makes reads correct.

Concurrent fetches of one key share a single task. Invalidation bumps an
entry's epoch; a fetch that started under an older epoch stores its data
but leaves the entry stale, so the next read goes back to the network.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import Any

from cuidador.config import settings
from cuidador.constants import MEDICAL_DATA_CATEGORIES

logger = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]
Fetcher = Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    """Cached data for one query key."""

    data: Any = None
    updated_at: float | None = None
    invalidated: bool = False
    epoch: int = 0
    fetcher: Fetcher | None = None
    refetch_after_flight: bool = False


class QueryCache:
    """In-memory query cache with request de-duplication.

    Args:
        stale_time: Seconds a successful fetch stays fresh.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        stale_time: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stale_time = settings.query_stale_seconds if stale_time is None else stale_time
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._in_flight: dict[QueryKey, asyncio.Task] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def get(self, key: QueryKey) -> Any:
        """Cached data for the key, fresh or not. None if never fetched."""
        entry = self._entries.get(key)
        return entry.data if entry else None

    def entry(self, key: QueryKey) -> CacheEntry | None:
        return self._entries.get(key)

    def is_fresh(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.invalidated or entry.updated_at is None:
            return False
        return self._clock() - entry.updated_at < self.stale_time

    def is_fetching(self, key: QueryKey) -> bool:
        return key in self._in_flight

    def set(self, key: QueryKey, data: Any) -> None:
        """Store data directly, e.g. after a mutation returned it."""
        entry = self._entries.setdefault(key, CacheEntry())
        entry.data = data
        entry.updated_at = self._clock()
        entry.invalidated = False

    async def fetch(self, key: QueryKey, fetcher: Fetcher, *, force: bool = False) -> Any:
        """Return fresh cached data or fetch it.

        Concurrent calls for one key await the same in-flight request. The
        fetcher is remembered so invalidation can schedule a refetch.

        Raises:
            Whatever the fetcher raises; the cached data is left untouched.
        """
        entry = self._entries.setdefault(key, CacheEntry())
        entry.fetcher = fetcher
        if not force and self.is_fresh(key):
            return entry.data
        return await asyncio.shield(self._start_fetch(key))

    def _start_fetch(self, key: QueryKey) -> asyncio.Task:
        task = self._in_flight.get(key)
        if task is not None:
            return task

        entry = self._entries[key]
        task = asyncio.ensure_future(self._run_fetch(key, entry.fetcher, entry.epoch))
        self._in_flight[key] = task
        task.add_done_callback(lambda done: self._finish_fetch(key, done))
        return task

    async def _run_fetch(self, key: QueryKey, fetcher: Fetcher, epoch: int) -> Any:
        data = await fetcher()
        entry = self._entries.get(key)
        if entry is None:
            # Removed while in flight; do not resurrect it.
            return data
        entry.data = data
        entry.updated_at = self._clock()
        if entry.epoch == epoch:
            entry.invalidated = False
        return data

    def _finish_fetch(self, key: QueryKey, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

        if not task.cancelled() and task.exception() is not None:
            logger.warning("Fetch for %s failed: %s", key, task.exception())

        entry = self._entries.get(key)
        if entry is not None and entry.refetch_after_flight:
            entry.refetch_after_flight = False
            if entry.invalidated and entry.fetcher is not None:
                self._start_fetch(key)

    def mark_stale(self, key: QueryKey) -> None:
        """Mark an entry stale. Marking an already stale entry changes nothing."""
        entry = self._entries.get(key)
        if entry is None or entry.invalidated:
            return
        entry.invalidated = True
        entry.epoch += 1

    def schedule_refetch(self, key: QueryKey) -> bool:
        """Start a background refetch without awaiting it.

        If a fetch is already in flight, no second request is issued; when
        that fetch predates the invalidation, one refetch follows it.

        Returns:
            True if a new request was started now.
        """
        entry = self._entries.get(key)
        if entry is None or entry.fetcher is None:
            return False
        if key in self._in_flight:
            entry.refetch_after_flight = True
            return False
        self._start_fetch(key)
        return True

    def remove(self, key: QueryKey) -> None:
        self._entries.pop(key, None)

    def matching(self, categories: Iterable[str]) -> list[QueryKey]:
        """Keys whose category is in the given set. Exact match only."""
        wanted = frozenset(categories)
        return [key for key in self._entries if key and key[0] in wanted]

    def clear(self) -> None:
        self._entries.clear()

    async def wait_idle(self) -> None:
        """Wait until no fetch is in flight; fetch errors are not raised here."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight.values()), return_exceptions=True)


class QueryCacheInvalidator:
    """Marks a fixed allowlist of categories stale after a context change.

    The allowlist keeps unrelated entries (profile, accessible-patient
    listing, reference data) intact across switches.
    """

    def __init__(self, cache: QueryCache, categories: Iterable[str] = MEDICAL_DATA_CATEGORIES):
        self.cache = cache
        self.categories = frozenset(categories)

    def invalidate(
        self,
        categories: Iterable[str] | None = None,
        *,
        refetch_scope: Hashable | None = None,
    ) -> int:
        """Mark matching entries stale and schedule refetches.

        Synchronous: refetches are scheduled, not awaited. Calling it twice
        in a row leaves the cache as one call does and issues no extra
        requests.

        Args:
            categories: Categories to invalidate, defaults to the allowlist.
            refetch_scope: When given, only entries for this effective
                patient id are refetched; others just go stale.

        Returns:
            Number of entries marked stale.
        """
        keys = self.cache.matching(self.categories if categories is None else categories)
        scheduled = 0
        for key in keys:
            self.cache.mark_stale(key)
            if refetch_scope is not None and (len(key) < 2 or key[1] != refetch_scope):
                continue
            if self.cache.schedule_refetch(key):
                scheduled += 1

        logger.debug("Invalidated %d cache entries, %d refetches scheduled", len(keys), scheduled)
        return len(keys)

    def remove(self, categories: Iterable[str] | None = None) -> int:
        """Drop matching entries outright. Returns how many were removed."""
        keys = self.cache.matching(self.categories if categories is None else categories)
        for key in keys:
            self.cache.remove(key)
        return len(keys)
