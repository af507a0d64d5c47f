"""In-process review job queue with a fixed worker pool.

Jobs are deduplicated by pull request while waiting, running or awaiting a
retry. Failed attempts are re-queued after an exponential backoff until the
retry budget is spent. Finished jobs are kept for a while for inspection.
"""

from __future__ import annotations

import asyncio
import logging
import time

from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from types import TracebackType

from lookout.domain.review.entities import ReviewJob
from lookout.infrastructure.queue.rate_limiter import SlidingWindowRateLimiter
from lookout.shared.constants import (
    COMPLETED_RETENTION_COUNT,
    COMPLETED_RETENTION_SECONDS,
    DEFAULT_CONCURRENCY,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    FAILED_RETENTION_SECONDS,
)

logger = logging.getLogger(__name__)

JobProcessor = Callable[[ReviewJob], Awaitable[object]]

# =============================================================================
# RETRY POLICY
# =============================================================================


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff: ``backoff_seconds * 2 ** (attempt - 1)``."""

    attempts: int = DEFAULT_RETRY_ATTEMPTS
    backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS

    def __post_init__(self) -> None:
        if self.attempts < 1:
            msg = f"attempts must be at least 1, got {self.attempts}"
            raise ValueError(msg)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return self.backoff_seconds * 2 ** (attempt - 1)

    def should_retry(self, attempts_made: int) -> bool:
        return attempts_made < self.attempts


# =============================================================================
# JOB RECORDS
# =============================================================================


class JobState(StrEnum):
    WAITING = "waiting"
    ACTIVE = "active"
    DELAYED = "delayed"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_in_flight(self) -> bool:
        return self in (JobState.WAITING, JobState.ACTIVE, JobState.DELAYED)


@dataclass
class JobRecord:
    """Queue-side bookkeeping for one job."""

    job: ReviewJob
    enqueued_at: float
    state: JobState = JobState.WAITING
    attempts_made: int = 0
    last_error: str | None = None
    finished_at: float | None = None

    @property
    def key(self) -> str:
        return self.job.dedupe_key

    def expired(self, now: float, retention_seconds: float) -> bool:
        """Whether a finished record is older than the retention window."""
        if self.finished_at is None:
            return False
        return now - self.finished_at > retention_seconds


# =============================================================================
# QUEUE
# =============================================================================


@dataclass
class ReviewJobQueue:
    """Async worker pool that runs review jobs through a processor.

    Use as an async context manager: workers start on enter and are
    cancelled on exit.

    Example::

        async with ReviewJobQueue(pipeline.process) as queue:
            queue.enqueue(job)
            await queue.wait_idle()
    """

    processor: JobProcessor
    concurrency: int = DEFAULT_CONCURRENCY
    rate_limiter: SlidingWindowRateLimiter = field(
        default_factory=SlidingWindowRateLimiter
    )
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    completed_retention_seconds: float = COMPLETED_RETENTION_SECONDS
    completed_retention_count: int = COMPLETED_RETENTION_COUNT
    failed_retention_seconds: float = FAILED_RETENTION_SECONDS
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    _pending: asyncio.Queue[str] = field(
        default_factory=asyncio.Queue[str], init=False
    )
    _in_flight: dict[str, JobRecord] = field(
        default_factory=dict[str, JobRecord], init=False
    )
    _completed: deque[JobRecord] = field(default_factory=deque[JobRecord], init=False)
    _failed: deque[JobRecord] = field(default_factory=deque[JobRecord], init=False)
    _workers: list[asyncio.Task[None]] = field(
        default_factory=list[asyncio.Task[None]], init=False
    )
    _retries: set[asyncio.Task[None]] = field(
        default_factory=set[asyncio.Task[None]], init=False
    )
    _idle: asyncio.Event = field(default_factory=asyncio.Event, init=False)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            msg = f"concurrency must be at least 1, got {self.concurrency}"
            raise ValueError(msg)
        self._idle.set()

    async def __aenter__(self) -> ReviewJobQueue:
        self._workers = [
            asyncio.create_task(self._work(), name=f"review-worker-{i}")
            for i in range(self.concurrency)
        ]
        logger.info(
            "Worker pool started: concurrency %d, rate limit %d/%.0fs",
            self.concurrency,
            self.rate_limiter.max_starts,
            self.rate_limiter.window_seconds,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Cancel workers and pending retries."""
        tasks = [*self._workers, *self._retries]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._workers.clear()
        self._retries.clear()
        logger.info("Worker pool shut down")

    # =================================================================
    # Public API
    # =================================================================

    def enqueue(self, job: ReviewJob) -> JobRecord:
        """Add a job unless one for the same pull request is in flight.

        Returns:
            The new record, or the existing in-flight record for the key.
        """
        existing = self._in_flight.get(job.dedupe_key)
        if existing is not None:
            logger.info("Job %s already queued (%s)", job.dedupe_key, existing.state)
            return existing

        record = JobRecord(job=job, enqueued_at=self.clock())
        self._in_flight[record.key] = record
        self._idle.clear()
        self._pending.put_nowait(record.key)
        logger.info("Enqueued review job %s", record.key)
        return record

    def is_queued(self, key: str) -> bool:
        """Whether a job for this key is waiting, active or awaiting retry."""
        return key in self._in_flight

    def get(self, key: str) -> JobRecord | None:
        """Look up the in-flight or most recently finished record for a key."""
        if key in self._in_flight:
            return self._in_flight[key]
        self._prune()
        finished = [*self._failed, *self._completed]
        matches = [r for r in finished if r.key == key]
        return max(
            matches,
            key=lambda r: r.finished_at if r.finished_at is not None else 0.0,
            default=None,
        )

    @property
    def in_flight(self) -> list[JobRecord]:
        return list(self._in_flight.values())

    @property
    def completed(self) -> list[JobRecord]:
        self._prune()
        return list(self._completed)

    @property
    def failed(self) -> list[JobRecord]:
        self._prune()
        return list(self._failed)

    async def wait_idle(self) -> None:
        """Wait until every enqueued job has finished or failed for good."""
        await self._idle.wait()

    # =================================================================
    # Workers
    # =================================================================

    async def _work(self) -> None:
        while True:
            key = await self._pending.get()
            try:
                record = self._in_flight.get(key)
                if record is None:
                    continue
                await self.rate_limiter.acquire()
                await self._attempt(record)
            finally:
                self._pending.task_done()

    async def _attempt(self, record: JobRecord) -> None:
        record.state = JobState.ACTIVE
        record.attempts_made += 1
        logger.info(
            "Starting %s (attempt %d/%d)",
            record.key,
            record.attempts_made,
            self.retry.attempts,
        )

        try:
            await self.processor(record.job)
        except Exception as exc:
            record.last_error = str(exc)
            if self.retry.should_retry(record.attempts_made):
                delay = self.retry.delay_for(record.attempts_made)
                logger.warning(
                    "Job %s failed (attempt %d), retrying in %.1fs: %s",
                    record.key,
                    record.attempts_made,
                    delay,
                    exc,
                )
                record.state = JobState.DELAYED
                task = asyncio.create_task(self._requeue_after(record, delay))
                self._retries.add(task)
                task.add_done_callback(self._retries.discard)
            else:
                logger.error(
                    "Job %s failed after %d attempts: %s",
                    record.key,
                    record.attempts_made,
                    exc,
                )
                self._finish(record, JobState.FAILED)
        else:
            logger.info("Job %s completed", record.key)
            self._finish(record, JobState.COMPLETED)

    async def _requeue_after(self, record: JobRecord, delay: float) -> None:
        await self.sleep(delay)
        record.state = JobState.WAITING
        self._pending.put_nowait(record.key)

    def _finish(self, record: JobRecord, state: JobState) -> None:
        record.state = state
        record.finished_at = self.clock()
        self._in_flight.pop(record.key, None)
        if state is JobState.COMPLETED:
            self._completed.append(record)
        else:
            self._failed.append(record)
        self._prune()
        if not self._in_flight:
            self._idle.set()

    def _prune(self) -> None:
        now = self.clock()
        while self._completed and (
            len(self._completed) > self.completed_retention_count
            or self._completed[0].expired(now, self.completed_retention_seconds)
        ):
            self._completed.popleft()
        while self._failed and self._failed[0].expired(
            now, self.failed_retention_seconds
        ):
            self._failed.popleft()
