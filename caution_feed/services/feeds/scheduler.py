"""In-process feed scheduler.

Drives two independent periodic sweeps over an injectable clock and
sleep function:

- Poll sweep: fetch, classify and ingest every due source, a bounded
  number of sources at a time. A failing source is recorded and the
  rest of the sweep continues.
- Retention sweep: delete items past the retention horizon.

Per-source state:

    IDLE -> DUE -> FETCHING -> INGESTED | FAILED -> IDLE

A source that is still FETCHING from an earlier sweep is skipped rather
than polled twice.

Each tick starts the due sweeps as separate tasks, so a long poll sweep
never delays retention. A sweep still running from an earlier tick is not
started again.
"""

import asyncio
import enum
import time
import uuid
from collections.abc import Coroutine
from datetime import datetime, timedelta
from typing import Any, TypeVar

from caution_feed.config.scheduling import SchedulerConfig
from caution_feed.core.exceptions import (
    CautionFeedError,
    RetentionSweepError,
    StoreUnavailableError,
)
from caution_feed.core.logging import get_logger, source_log_context
from caution_feed.core.types import Clock, Sleeper, utc_now
from caution_feed.services.feeds.base import (
    FeedSourceInfo,
    SourceRunResult,
    SourceRunStatus,
    SweepReport,
)
from caution_feed.services.feeds.fetcher import FeedFetcher
from caution_feed.services.feeds.ingester import DeduplicatingIngester
from caution_feed.services.feeds.registry import SourceRegistry
from caution_feed.services.feeds.retention import RetentionSweeper

logger = get_logger(__name__)

T = TypeVar("T")


class SourceState(str, enum.Enum):
    """Poll state of one source."""

    IDLE = "idle"
    DUE = "due"
    FETCHING = "fetching"
    INGESTED = "ingested"
    FAILED = "failed"


class FeedScheduler:
    """Runs poll and retention sweeps on their cadences.

    Attributes:
        registry: Source registry
        fetcher: Feed fetcher
        ingester: Deduplicating ingester
        sweeper: Retention sweeper
        config: Scheduler configuration
        clock: Time source
        sleep: Async sleep used between ticks
    """

    def __init__(
        self,
        registry: SourceRegistry,
        fetcher: FeedFetcher,
        ingester: DeduplicatingIngester,
        sweeper: RetentionSweeper,
        config: SchedulerConfig | None = None,
        clock: Clock = utc_now,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize feed scheduler.

        Args:
            registry: Source registry
            fetcher: Feed fetcher
            ingester: Deduplicating ingester
            sweeper: Retention sweeper
            config: Scheduler configuration (uses defaults if not provided)
            clock: Time source
            sleep: Async sleep used between ticks
        """
        self.registry = registry
        self.fetcher = fetcher
        self.ingester = ingester
        self.sweeper = sweeper
        self.config = config or SchedulerConfig()
        self.clock = clock
        self.sleep = sleep

        self._states: dict[uuid.UUID, SourceState] = {}
        self._in_flight: set[uuid.UUID] = set()
        self._semaphore = asyncio.Semaphore(self.config.max_concurrent_sources)
        self._last_poll_at: datetime | None = None
        self._last_retention_at: datetime | None = None
        self._task: asyncio.Task[None] | None = None
        self._poll_task: asyncio.Task[SweepReport] | None = None
        self._retention_task: asyncio.Task[int | None] | None = None
        self._stopping = False

    # =========================================================================
    # State
    # =========================================================================

    def state_of(self, source_id: uuid.UUID) -> SourceState:
        """Get the current poll state of a source (IDLE if never seen)."""
        return self._states.get(source_id, SourceState.IDLE)

    @property
    def in_flight(self) -> frozenset[uuid.UUID]:
        """Sources currently being fetched or ingested."""
        return frozenset(self._in_flight)

    @property
    def is_running(self) -> bool:
        """Whether the background loop task is alive."""
        return self._task is not None and not self._task.done()

    # =========================================================================
    # Poll sweep
    # =========================================================================

    async def run_poll_sweep(self, ignore_interval: bool = False) -> SweepReport:
        """Poll every due source once.

        Args:
            ignore_interval: Poll all active sources regardless of their interval

        Returns:
            SweepReport with one result per selected source
        """
        report = SweepReport(started_at=self.clock())

        try:
            if ignore_interval:
                sources = await self.registry.list_active()
            else:
                sources = await self.registry.list_due_sources(report.started_at)
        except StoreUnavailableError as e:
            logger.error("Poll sweep skipped, source registry unavailable", error=str(e))
            report.skipped = True
            report.error = str(e)
            report.completed_at = self.clock()
            return report

        runs = []
        for source in sources:
            if source.id in self._in_flight:
                report.results.append(self._in_flight_result(source))
                continue
            self._claim(source)
            runs.append(self._run_claimed(source))

        report.results.extend(await asyncio.gather(*runs))
        report.completed_at = self.clock()

        logger.info(
            "Poll sweep completed",
            sources=len(report.results),
            new_count=report.new_count,
            failed=len(report.failed),
            ignore_interval=ignore_interval,
        )
        return report

    def _claim(self, source: FeedSourceInfo) -> None:
        self._in_flight.add(source.id)
        self._states[source.id] = SourceState.DUE

    def _in_flight_result(self, source: FeedSourceInfo) -> SourceRunResult:
        logger.info(
            "Source still in flight, skipping",
            source_id=str(source.id),
            source_name=source.name,
        )
        return SourceRunResult(
            source_id=source.id,
            source_name=source.name,
            status=SourceRunStatus.IN_FLIGHT,
        )

    async def _run_claimed(self, source: FeedSourceInfo) -> SourceRunResult:
        try:
            async with self._semaphore:
                with source_log_context(source):
                    return await self._fetch_and_ingest(source)
        finally:
            self._in_flight.discard(source.id)
            self._states[source.id] = SourceState.IDLE

    async def _fetch_and_ingest(self, source: FeedSourceInfo) -> SourceRunResult:
        """Fetch, classify and ingest one source, then record the attempt.

        Args:
            source: Claimed source

        Returns:
            SourceRunResult
        """
        started = time.monotonic()
        self._states[source.id] = SourceState.FETCHING
        result = SourceRunResult(
            source_id=source.id,
            source_name=source.name,
            status=SourceRunStatus.INGESTED,
        )

        try:
            entries = await self.fetcher.fetch(source)
            ingest_result = await self.ingester.ingest(source, entries)
        except CautionFeedError as e:
            self._states[source.id] = SourceState.FAILED
            result.status = SourceRunStatus.FAILED
            result.error = str(e)
            logger.error(
                "Feed source poll failed",
                error=str(e),
                error_type=type(e).__name__,
            )
        except Exception as e:
            self._states[source.id] = SourceState.FAILED
            result.status = SourceRunStatus.FAILED
            result.error = str(e)[:500]
            logger.error(
                "Feed source poll crashed",
                error=str(e),
                exc_info=True,
            )
        else:
            self._states[source.id] = SourceState.INGESTED
            result.new_count = ingest_result.new_count
            result.duplicate_count = ingest_result.duplicate_count
            result.item_errors = ingest_result.error_count

        await self._mark_fetched(source)
        result.duration_seconds = time.monotonic() - started
        return result

    async def _mark_fetched(self, source: FeedSourceInfo) -> None:
        try:
            await self.registry.mark_fetched(source.id, self.clock())
        except StoreUnavailableError as e:
            logger.error("Failed to record fetch time", error=str(e))

    # =========================================================================
    # Retention sweep
    # =========================================================================

    async def run_retention_sweep(self) -> int | None:
        """Run the retention sweeper once.

        Returns:
            Deleted item count, or None if the sweep failed
        """
        try:
            return await self.sweeper.purge_older_than()
        except RetentionSweepError as e:
            logger.error("Retention sweep failed", error=str(e))
            return None

    # =========================================================================
    # Loop
    # =========================================================================

    def _is_due(self, last_run: datetime | None, every: timedelta, now: datetime) -> bool:
        return last_run is None or now - last_run >= every

    @staticmethod
    def _is_busy(task: asyncio.Task[Any] | None) -> bool:
        return task is not None and not task.done()

    def _on_sweep_done(self, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Scheduler sweep crashed",
                sweep=task.get_name(),
                error=str(exc),
                exc_info=exc,
            )

    def _spawn(self, coro: Coroutine[Any, Any, T], name: str) -> asyncio.Task[T]:
        task = asyncio.create_task(coro, name=name)
        task.add_done_callback(self._on_sweep_done)
        return task

    async def tick(self) -> list[asyncio.Task[Any]]:
        """Start whichever sweeps are due at the current clock time.

        Returns:
            Sweep tasks started by this tick
        """
        now = self.clock()
        started: list[asyncio.Task[Any]] = []

        if not self._is_busy(self._poll_task) and self._is_due(
            self._last_poll_at, timedelta(seconds=self.config.poll_sweep_seconds), now
        ):
            self._last_poll_at = now
            self._poll_task = self._spawn(self.run_poll_sweep(), "feed-poll-sweep")
            started.append(self._poll_task)

        if not self._is_busy(self._retention_task) and self._is_due(
            self._last_retention_at, timedelta(hours=self.config.retention_sweep_hours), now
        ):
            self._last_retention_at = now
            self._retention_task = self._spawn(self.run_retention_sweep(), "feed-retention-sweep")
            started.append(self._retention_task)

        return started

    async def run_forever(self) -> None:
        """Tick and sleep until stop() is called."""
        self._stopping = False
        logger.info(
            "Feed scheduler started",
            poll_sweep_seconds=self.config.poll_sweep_seconds,
            retention_sweep_hours=self.config.retention_sweep_hours,
            tick_seconds=self.config.tick_seconds,
        )

        while not self._stopping:
            try:
                await self.tick()
            except Exception as e:
                logger.error("Scheduler tick failed", error=str(e), exc_info=True)
            if self._stopping:
                break
            await self.sleep(self.config.tick_seconds)

        logger.info("Feed scheduler stopped")

    def start(self) -> None:
        """Start the loop as a background task on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self.run_forever(), name="feed-scheduler")

    async def stop(self) -> None:
        """Stop the loop and cancel sweeps still in progress."""
        self._stopping = True
        tasks = [t for t in (self._task, self._poll_task, self._retention_task) if t is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._poll_task = None
        self._retention_task = None


__all__ = ["FeedScheduler", "SourceState"]
