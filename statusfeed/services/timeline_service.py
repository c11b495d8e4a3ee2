"""
Timeline service - fetches every configured source and merges them.

A FetchJob holds the queue of source URLs still to fetch and the feed
accumulated so far. TimelineFetcher drives one job through its states:

    IDLE -> FETCHING -> DONE | FAILED | CANCELLED

Sources are fetched strictly one at a time. Each fetched feed is folded
into the accumulator (duplicates removed, then merged by time) before the
next request is issued, so the accumulator has a single writer and needs
no locking.

Any FeedError ends the job as FAILED and the partial accumulator is
discarded: a feed missing one of its sources is never delivered as if it
were complete. Nothing is retried here; a caller that wants to retry runs
a fresh job.
"""

import asyncio
import inspect
import time
import uuid
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from statusfeed.config.settings import Settings
from statusfeed.ingestion.status_client import StatusClient
from statusfeed.observability.metrics import MetricsCollector, get_metrics
from statusfeed.timeline.errors import (
    FeedError,
    MalformedTimestamp,
    ServiceError,
    TransportFailure,
)
from statusfeed.timeline.merge import merge_into
from statusfeed.timeline.schemas import Status

logger = structlog.get_logger(__name__)

FeedCallback = Callable[[list[Status]], Any]
ErrorCallback = Callable[[FeedError], Any]


class FetchState(str, Enum):
    """Lifecycle states of a fetch job."""

    IDLE = "idle"
    FETCHING = "fetching"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class FetchJob:
    """
    One request to retrieve and merge a set of sources into a single feed.

    Jobs are independent: each owns its source queue and accumulator.
    """

    sources: deque[str]
    accumulator: list[Status] = field(default_factory=list)
    state: FetchState = FetchState.IDLE
    error: FeedError | None = None
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    _cancelled: bool = field(default=False, repr=False)

    @classmethod
    def for_sources(cls, sources: Iterable[str]) -> "FetchJob":
        """
        Create a job for the given source URLs, fetched in order.

        Raises:
            ValueError: If no sources are given
        """
        queue = deque(sources)
        if not queue:
            raise ValueError("A fetch job needs at least one source")
        return cls(sources=queue)

    def cancel(self) -> None:
        """
        Abandon the job.

        A request already in flight is allowed to finish, but its result is
        not merged and the job's feed is never delivered.
        """
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_finished(self) -> bool:
        return self.state in (FetchState.DONE, FetchState.FAILED, FetchState.CANCELLED)

    @property
    def feed(self) -> list[Status] | None:
        """The merged feed if the job completed successfully, else None."""
        if self.state is FetchState.DONE:
            return self.accumulator
        return None


def timeline_sources(settings: Settings, include_replies: bool | None = None) -> list[str]:
    """
    Source URLs for the user's timeline view.

    The friends timeline is always fetched first; the replies feed follows
    when enabled.
    """
    if include_replies is None:
        include_replies = settings.include_replies

    sources = [settings.friends_timeline_url]
    if include_replies:
        sources.append(settings.replies_url)
    return sources


def _outcome(error: FeedError) -> str:
    if isinstance(error, ServiceError):
        return "service_error"
    if isinstance(error, MalformedTimestamp):
        return "malformed_timestamp"
    if isinstance(error, TransportFailure):
        return "transport_failure"
    return "error"


class TimelineFetcher:
    """
    Drives fetch jobs against a StatusClient.

    The finished feed goes to on_feed and a terminal error goes to
    on_error. Callbacks may be plain functions or coroutine functions.

    Usage:
        fetcher = TimelineFetcher(client, on_feed=render, on_error=report)
        job = FetchJob.for_sources(timeline_sources(settings))
        await fetcher.run(job)
    """

    def __init__(
        self,
        client: StatusClient,
        on_feed: FeedCallback | None = None,
        on_error: ErrorCallback | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize timeline fetcher.

        Args:
            client: Client used to fetch each source
            on_feed: Receives the merged feed when a job completes
            on_error: Receives the error when a job fails
            metrics: Metrics collector (defaults to the global one)
        """
        self._client = client
        self._on_feed = on_feed
        self._on_error = on_error
        self._metrics = metrics or get_metrics()

    async def run(self, job: FetchJob) -> FetchJob:
        """
        Run a job to completion.

        Failures are recorded on the job and reported through on_error
        rather than raised.

        Args:
            job: Job in IDLE state

        Returns:
            The same job, in a terminal state

        Raises:
            RuntimeError: If the job has already been run
        """
        if job.state is not FetchState.IDLE:
            raise RuntimeError(f"Fetch job {job.job_id} already ran (state={job.state.value})")

        log = logger.bind(job_id=job.job_id)
        job.state = FetchState.FETCHING
        log.info("Starting fetch job", sources=len(job.sources))

        try:
            while job.sources and not job.cancelled:
                url = job.sources.popleft()
                await self._fetch_source(job, url, log)
        except FeedError as e:
            await self._fail(job, e, log)
            return job
        except asyncio.CancelledError:
            job.state = FetchState.CANCELLED
            job.accumulator = []
            raise

        if job.cancelled:
            job.state = FetchState.CANCELLED
            job.accumulator = []
            job.sources.clear()
            self._metrics.record_job(FetchState.CANCELLED.value)
            log.info("Fetch job abandoned")
            return job

        job.state = FetchState.DONE
        self._metrics.record_job(FetchState.DONE.value, feed_size=len(job.accumulator))
        log.info("Fetch job completed", statuses=len(job.accumulator))

        await self._deliver(self._on_feed, job.accumulator)
        return job

    async def fetch_timeline(self, sources: Iterable[str]) -> list[Status]:
        """
        Fetch and merge sources, returning the feed.

        Raises:
            FeedError: The job's terminal error, if it failed
            RuntimeError: If the job was abandoned before completing
        """
        job = FetchJob.for_sources(sources)
        await self.run(job)

        if job.error is not None:
            raise job.error
        if job.feed is None:
            raise RuntimeError(f"Fetch job {job.job_id} ended in state {job.state.value}")
        return job.feed

    async def _fetch_source(self, job: FetchJob, url: str, log) -> None:
        start = time.monotonic()
        try:
            candidate = await self._client.fetch_feed(url)
        except FeedError as e:
            self._metrics.record_source_request(_outcome(e), time.monotonic() - start)
            raise
        self._metrics.record_source_request("ok", time.monotonic() - start)

        if job.cancelled:
            log.debug("Discarding source result for abandoned job", source=url)
            return

        job.accumulator, duplicates = merge_into(job.accumulator, candidate)
        self._metrics.record_merge(len(candidate), duplicates)

        log.info(
            "Merged source",
            source=url,
            fetched=len(candidate),
            duplicates=duplicates,
            total=len(job.accumulator),
            remaining=len(job.sources),
        )

    async def _fail(self, job: FetchJob, error: FeedError, log) -> None:
        job.state = FetchState.FAILED
        job.error = error
        job.accumulator = []
        job.sources.clear()

        self._metrics.record_job(FetchState.FAILED.value)
        log.error(
            "Fetch job failed",
            error=error.message,
            error_type=type(error).__name__,
        )

        await self._deliver(self._on_error, error)

    @staticmethod
    async def _deliver(callback: Callable[[Any], Any] | None, value: Any) -> None:
        if callback is None:
            return
        result = callback(value)
        if inspect.isawaitable(result):
            await result
