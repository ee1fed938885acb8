"""TTL menu cache shared by concurrent readers."""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Protocol

from ucsc_menu.domain.locations import Locations
from ucsc_menu.domain.snapshot import CacheSnapshot
from ucsc_menu.services.store import SnapshotStore

REFRESH_INTERVAL = timedelta(minutes=15)
RETRY_DELAY = timedelta(minutes=1)

# needs_refresh is strict, so wake just after the interval has passed.
_STALE_MARGIN = timedelta(seconds=1)

_logger = logging.getLogger(__name__)


class MenuSource(Protocol):
    """Anything that can scrape a complete, fresh Locations set."""

    async def refresh(self) -> Locations:
        """Return freshly scraped locations."""


class CacheNotOpenError(RuntimeError):
    """Raised when the cache is used before ``open`` succeeded."""


class RefreshError(Exception):
    """Raised when a refresh fails; the previous snapshot stays in place."""


class CacheState(Enum):
    COLD = "cold"
    WARM = "warm"


class ReadWriteLock:
    """asyncio reader/writer lock that prefers waiting writers."""

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(
                lambda: not self._writer and self._waiting_writers == 0
            )
            self._readers += 1
        try:
            yield
        finally:
            async with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._condition:
            self._waiting_writers += 1
            try:
                await self._condition.wait_for(
                    lambda: not self._writer and self._readers == 0
                )
            finally:
                self._waiting_writers -= 1
                self._condition.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._condition:
                self._writer = False
                self._condition.notify_all()


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MenuCache:
    """Holds the current snapshot and refreshes it when it goes stale.

    Scraping happens outside any lock; only persisting and swapping the
    snapshot take the writer section. Concurrent refresh callers share a
    single in-flight refresh.
    """

    source: MenuSource
    store: SnapshotStore
    refresh_interval: timedelta = REFRESH_INTERVAL
    clock: Callable[[], datetime] = _utc_now
    _snapshot: CacheSnapshot | None = field(init=False, default=None)
    _lock: ReadWriteLock = field(init=False, default_factory=ReadWriteLock)
    _inflight: "asyncio.Task[bool] | None" = field(init=False, default=None)

    @property
    def state(self) -> CacheState:
        return CacheState.COLD if self._snapshot is None else CacheState.WARM

    async def open(self) -> CacheSnapshot:
        """Load the stored snapshot, scraping and saving one if the store is empty."""
        try:
            snapshot = await self.store.load()
        except Exception:
            _logger.exception("Loading stored menu snapshot failed")
            snapshot = None
        if snapshot is not None:
            _logger.info("Loaded menu snapshot cached at %s", snapshot.cached_at)
            async with self._lock.write():
                self._snapshot = snapshot
            return snapshot

        _logger.info("No stored menu snapshot; scraping")
        snapshot = await self._build_snapshot()
        await self._publish(snapshot)
        return snapshot

    def needs_refresh(
        self, snapshot: CacheSnapshot | None = None, now: datetime | None = None
    ) -> bool:
        """Return True when the snapshot is older than the refresh interval."""
        snapshot = snapshot or self._require_snapshot()
        current = now or self.clock()
        return current - snapshot.cached_at > self.refresh_interval

    def time_since_refresh(self) -> timedelta:
        return self.clock() - self._require_snapshot().cached_at

    def time_until_refresh(self) -> timedelta:
        return self.refresh_interval - self.time_since_refresh()

    async def maybe_refresh(self) -> bool:
        """Refresh if stale; return whether a new snapshot was swapped in."""
        if not self.needs_refresh():
            return False
        return await self._refresh_single_flight()

    async def force_refresh(self) -> bool:
        """Refresh regardless of staleness."""
        self._require_snapshot()
        return await self._refresh_single_flight()

    @asynccontextmanager
    async def get(self) -> AsyncIterator[CacheSnapshot]:
        """Hold a shared read section for the lifetime of the context."""
        async with self._lock.read():
            yield self._require_snapshot()

    async def run_refresh_loop(self, poll_interval: timedelta | None = None) -> None:
        """Refresh whenever the snapshot goes stale; failures are retried.

        The first check runs at once, so a stale stored snapshot is replaced
        at startup. A cache that is still cold (its first load failed) is
        opened again.
        """
        while True:
            try:
                if self.state is CacheState.COLD:
                    await self.open()
                await self.maybe_refresh()
            except RefreshError:
                _logger.warning("Scheduled menu refresh failed; serving stale data")
            delay = poll_interval or self.next_check_delay()
            await asyncio.sleep(delay.total_seconds())

    def next_check_delay(self) -> timedelta:
        """Time until the snapshot goes stale, or the retry delay if it already is."""
        retry = min(RETRY_DELAY, self.refresh_interval)
        if self.state is CacheState.COLD or self.needs_refresh():
            return retry
        return self.time_until_refresh() + _STALE_MARGIN

    async def close(self) -> None:
        """Cancel any in-flight refresh."""
        task = self._inflight
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _refresh_single_flight(self) -> bool:
        task = self._inflight
        if task is None or task.done():
            task = asyncio.get_running_loop().create_task(self._refresh())
            self._inflight = task
        # A caller's cancellation must not cancel the shared refresh.
        return await asyncio.shield(task)

    async def _refresh(self) -> bool:
        started = time.monotonic()
        snapshot = await self._build_snapshot()
        await self._publish(snapshot)
        _logger.info(
            "Refreshed menu cache in %.1fs (%s locations)",
            time.monotonic() - started,
            len(snapshot.locations),
        )
        return True

    async def _build_snapshot(self) -> CacheSnapshot:
        try:
            locations = await self.source.refresh()
        except Exception as exc:
            _logger.exception("Menu scrape failed")
            raise RefreshError(f"Menu scrape failed: {exc}") from exc
        return CacheSnapshot(cached_at=self.clock(), locations=locations)

    async def _publish(self, snapshot: CacheSnapshot) -> None:
        async with self._lock.write():
            try:
                await self.store.save(snapshot)
            except Exception as exc:
                _logger.exception("Persisting menu snapshot failed")
                raise RefreshError(f"Persisting menu snapshot failed: {exc}") from exc
            self._snapshot = snapshot

    def _require_snapshot(self) -> CacheSnapshot:
        if self._snapshot is None:
            raise CacheNotOpenError("Menu cache has not been opened")
        return self._snapshot
