"""Ingestion worker.

The worker runs either as a background task of the FastAPI application or
as its own process (``folio-worker``). It claims due jobs from the queue,
runs each through the ingestion pipeline and records the outcome on the
job row before moving on.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ingestion.domain.value_objects import IngestionJob, RetryPolicy
from ingestion.infrastructure.observability import (
    DefaultIngestionQueueProbe,
    DefaultIngestionWorkerProbe,
    IngestionQueueProbe,
    IngestionWorkerProbe,
)
from ingestion.infrastructure.queue import IngestionJobQueue
from ingestion.ports.exceptions import IngestionError
from portfolios.ports.exceptions import ReplacePersistenceError


class JobProcessor(Protocol):
    async def run(self, job: IngestionJob) -> int:
        ...


class IngestionWorker:
    """Background worker that drains the ingestion job queue.

    The worker uses two strategies:
    1. LISTEN/NOTIFY: wakes up as soon as a job is published
    2. Polling: every N seconds, to catch retries that became due and any
       notification that was missed

    Each job is acknowledged only after its outcome (done, retry scheduled
    or dead-lettered) has been committed. A worker that dies mid-job leaves
    the job leased; it becomes claimable again when the lease expires.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        processor: JobProcessor,
        probe: IngestionWorkerProbe | None = None,
        queue_probe: IngestionQueueProbe | None = None,
        listen_dsn: str | None = None,
        notify_channel: str = "ingestion_jobs",
        poll_interval_seconds: float = 5,
        batch_size: int = 10,
        concurrency: int = 1,
        retry_policy: RetryPolicy | None = None,
        lease_seconds: int = 600,
    ) -> None:
        """Initialize the worker.

        Args:
            session_factory: Factory for queue sessions
            processor: Runs a single job, usually the IngestionPipeline
            probe: Observability probe for the worker loops
            queue_probe: Observability probe for queue transitions
            listen_dsn: PostgreSQL DSN for LISTEN; None disables the listener
            notify_channel: Channel the publisher notifies on
            poll_interval_seconds: How often to poll for due jobs
            batch_size: Maximum jobs claimed at once
            concurrency: Maximum jobs processed at once
            retry_policy: Backoff and attempt budget for failed jobs
            lease_seconds: How long a claimed job stays leased
        """
        self._session_factory = session_factory
        self._processor = processor
        self._probe = probe or DefaultIngestionWorkerProbe()
        self._queue_probe = queue_probe or DefaultIngestionQueueProbe()
        self._listen_dsn = listen_dsn
        self._notify_channel = notify_channel
        self._poll_interval = poll_interval_seconds
        self._batch_size = batch_size
        self._semaphore = asyncio.Semaphore(max(concurrency, 1))
        self._retry_policy = retry_policy or RetryPolicy()
        self._lease_seconds = lease_seconds
        self._wake = asyncio.Event()
        self._running = False
        self._tasks: list[asyncio.Task] = []

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the worker processing loops."""
        self._running = True
        self._probe.worker_started()

        # Poll loop always runs; it is the fallback for the listener
        self._tasks.append(asyncio.create_task(self._poll_loop()))

        if self._listen_dsn:
            self._tasks.append(asyncio.create_task(self._listen_loop()))

    async def stop(self) -> None:
        """Gracefully stop the worker.

        Cancels the loops and waits for them, including any job in flight.
        A cancelled job stays leased and is retried after its lease.
        """
        self._running = False

        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._tasks.clear()
        self._probe.worker_stopped()

    async def run_once(self) -> int:
        """Claim one batch of due jobs and process it.

        Returns:
            Number of jobs claimed
        """
        async with self._session_factory() as session:
            async with session.begin():
                jobs = await self._queue(session).claim(self._batch_size)

        if jobs:
            await asyncio.gather(*(self._process_limited(job) for job in jobs))
        return len(jobs)

    async def _listen_loop(self) -> None:
        """Wake the poll loop on PostgreSQL NOTIFY.

        Uses asyncpg-listen for reliable connection handling.
        """
        from asyncpg_listen import (
            ListenPolicy,
            NotificationListener,
            NotificationOrTimeout,
            Timeout,
            connect_func,
        )

        self._probe.listen_loop_started(self._notify_channel)

        async def handle_notification(notification: NotificationOrTimeout) -> None:
            if not self._running or isinstance(notification, Timeout):
                return
            self._wake.set()

        assert self._listen_dsn is not None
        listener = NotificationListener(connect_func(self._listen_dsn))
        try:
            await listener.run(
                {self._notify_channel: handle_notification},
                policy=ListenPolicy.LAST,
                notification_timeout=self._poll_interval,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Polling keeps the queue moving without notifications
            self._probe.listen_loop_error(str(e))

    async def _poll_loop(self) -> None:
        """Process due jobs until stopped.

        Full batches are drained back to back; otherwise the loop sleeps
        until the poll interval passes or a notification arrives.
        """
        self._probe.poll_loop_started()

        while self._running:
            try:
                claimed = await self.run_once()
            except Exception as e:
                self._probe.poll_loop_error(str(e))
                claimed = 0

            if claimed >= self._batch_size:
                continue

            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self._poll_interval)
            except TimeoutError:
                pass
            self._wake.clear()

    async def _process_limited(self, job: IngestionJob) -> None:
        async with self._semaphore:
            await self._process(job)

    async def _process(self, job: IngestionJob) -> None:
        """Run one job and record its outcome."""
        try:
            await self._processor.run(job)
        except (IngestionError, ReplacePersistenceError) as e:
            await self._record_failure(job, str(e), e.retryable)
            return
        except Exception as e:
            # Unexpected failures are retried until the attempt budget runs out
            await self._record_failure(job, f"{type(e).__name__}: {e}", True)
            return

        async with self._session_factory() as session:
            async with session.begin():
                await self._queue(session).mark_done(job.id)
        self._probe.job_succeeded(job.id, job.tenant_id)

    async def _record_failure(
        self, job: IngestionJob, error: str, retryable: bool
    ) -> None:
        self._probe.job_failed(job.id, error, retryable)
        async with self._session_factory() as session:
            async with session.begin():
                await self._queue(session).mark_failed(job.id, error, retryable)

    def _queue(self, session: AsyncSession) -> IngestionJobQueue:
        return IngestionJobQueue(
            session,
            retry_policy=self._retry_policy,
            lease_seconds=self._lease_seconds,
            notify_channel=None,
            probe=self._queue_probe,
        )
