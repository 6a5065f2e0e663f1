"""Durable ingestion job queue on the application database.

One row per upload. Publishing happens in the uploader's transaction, so
a job exists exactly when the upload was accepted. On PostgreSQL the
publisher also issues ``pg_notify`` so a listening worker wakes up when
the transaction commits; polling picks up anything a notification missed.

Claiming uses ``FOR UPDATE SKIP LOCKED`` so concurrent workers never
lease the same job. A job left ``processing`` by a crashed worker is
claimable again once its lease has expired.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy import and_, or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ingestion.domain.value_objects import (
    IngestionEvent,
    IngestionJob,
    JobStatus,
    RetryPolicy,
)
from ingestion.infrastructure.models import IngestionJobModel
from ingestion.infrastructure.observability import (
    DefaultIngestionQueueProbe,
    IngestionQueueProbe,
)
from ingestion.ports.exceptions import (
    IngestionJobNotFoundError,
    JobNotDeadLetteredError,
)
from ingestion.ports.services import IIngestionJobQueue

MAX_ERROR_LENGTH = 2000


def _utc_now() -> datetime:
    return datetime.now(UTC)


class IngestionJobQueue(IIngestionJobQueue):
    """PostgreSQL implementation of the ingestion job queue.

    Like the repositories, the queue never commits: the caller owns the
    transaction boundary.
    """

    def __init__(
        self,
        session: AsyncSession,
        retry_policy: RetryPolicy | None = None,
        lease_seconds: int = 600,
        notify_channel: str | None = "ingestion_jobs",
        probe: IngestionQueueProbe | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            session: Session whose transaction queue writes join
            retry_policy: Backoff and attempt budget for failed jobs
            lease_seconds: How long a claimed job stays leased
            notify_channel: NOTIFY channel for new jobs, None to disable
            probe: Optional probe for observability
        """
        self._session = session
        self._retry_policy = retry_policy or RetryPolicy()
        self._lease = timedelta(seconds=lease_seconds)
        self._notify_channel = notify_channel
        self._probe = probe or DefaultIngestionQueueProbe()

    async def publish(self, event: IngestionEvent, tenant_id: str) -> IngestionJob:
        """Append a pending job for ``event`` on behalf of ``tenant_id``."""
        model = IngestionJobModel(
            id=IngestionJob.new_id(),
            tenant_id=tenant_id,
            portfolio_id=event.portfolio_id,
            document_ref=event.document_ref,
            status=JobStatus.PENDING.value,
            attempts=0,
        )
        self._session.add(model)
        await self._session.flush()
        await self._notify(model.id)

        self._probe.job_published(model.id, tenant_id, event.portfolio_id)
        return model.to_value_object()

    async def claim(self, limit: int) -> list[IngestionJob]:
        """Lease up to ``limit`` due jobs, oldest first.

        Due jobs are pending or failed jobs whose retry time has come, and
        processing jobs whose lease expired. Each claimed job counts one
        more attempt. An expired lease whose job has used up its attempt budget is
        dead-lettered instead of claimed.
        """
        now = _utc_now()
        stmt = (
            select(IngestionJobModel)
            .where(
                or_(
                    and_(
                        IngestionJobModel.status.in_(
                            [JobStatus.PENDING.value, JobStatus.FAILED.value]
                        ),
                        or_(
                            IngestionJobModel.next_attempt_at.is_(None),
                            IngestionJobModel.next_attempt_at <= now,
                        ),
                    ),
                    and_(
                        IngestionJobModel.status == JobStatus.PROCESSING.value,
                        IngestionJobModel.locked_at < now - self._lease,
                    ),
                )
            )
            .order_by(IngestionJobModel.created_at, IngestionJobModel.id)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        result = await self._session.execute(stmt)
        models = list(result.scalars().all())

        claimed = []
        for model in models:
            # A worker that died mid-job never recorded the failure
            if model.status == JobStatus.PROCESSING.value and (
                self._retry_policy.should_dead_letter(model.attempts, retryable=True)
            ):
                error = f"Lease expired after {model.attempts} attempts"
                model.status = JobStatus.DEAD_LETTERED.value
                model.last_error = error
                model.locked_at = None
                model.next_attempt_at = None
                model.dead_lettered_at = now
                self._probe.job_dead_lettered(model.id, model.attempts, error)
                continue
            model.status = JobStatus.PROCESSING.value
            model.attempts += 1
            model.locked_at = now
            claimed.append(model)
        await self._session.flush()

        if claimed:
            self._probe.jobs_claimed(len(claimed))
        return [model.to_value_object() for model in claimed]

    async def mark_done(self, job_id: str) -> None:
        """Record that the job's outcome was committed."""
        model = await self._session.get(IngestionJobModel, job_id)
        if model is None:
            return
        model.status = JobStatus.DONE.value
        model.completed_at = _utc_now()
        model.locked_at = None
        model.last_error = None
        await self._session.flush()

    async def mark_failed(
        self, job_id: str, error: str, retryable: bool
    ) -> IngestionJob | None:
        """Record a failure and either schedule a retry or dead-letter the job.

        Returns:
            The updated job, or None if it no longer exists
        """
        model = await self._session.get(IngestionJobModel, job_id)
        if model is None:
            return None

        now = _utc_now()
        model.last_error = error[:MAX_ERROR_LENGTH]
        model.locked_at = None

        if self._retry_policy.should_dead_letter(model.attempts, retryable):
            model.status = JobStatus.DEAD_LETTERED.value
            model.dead_lettered_at = now
            model.next_attempt_at = None
            self._probe.job_dead_lettered(model.id, model.attempts, error)
        else:
            model.status = JobStatus.FAILED.value
            model.next_attempt_at = now + self._retry_policy.backoff(model.attempts)
            self._probe.job_retry_scheduled(model.id, model.attempts, error)

        await self._session.flush()
        return model.to_value_object()

    async def get(self, job_id: str, tenant_id: str) -> IngestionJob | None:
        model = await self._get_for_tenant(job_id, tenant_id)
        return model.to_value_object() if model else None

    async def latest_for_portfolio(
        self, portfolio_id: str, tenant_id: str
    ) -> IngestionJob | None:
        """Most recent job of a portfolio in ``tenant_id``."""
        stmt = (
            select(IngestionJobModel)
            .where(IngestionJobModel.portfolio_id == portfolio_id)
            .where(IngestionJobModel.tenant_id == tenant_id)
            .order_by(IngestionJobModel.created_at.desc(), IngestionJobModel.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return model.to_value_object() if model else None

    async def list_dead_lettered(
        self, tenant_id: str, limit: int = 100
    ) -> list[IngestionJob]:
        """Dead-lettered jobs of ``tenant_id``, most recent first."""
        stmt = (
            select(IngestionJobModel)
            .where(IngestionJobModel.tenant_id == tenant_id)
            .where(IngestionJobModel.status == JobStatus.DEAD_LETTERED.value)
            .order_by(IngestionJobModel.dead_lettered_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [model.to_value_object() for model in result.scalars().all()]

    async def redrive(self, job_id: str, tenant_id: str) -> IngestionJob:
        """Return a dead-lettered job to the queue with a fresh attempt budget.

        Raises:
            IngestionJobNotFoundError: If the tenant has no such job
            JobNotDeadLetteredError: If the job is not dead-lettered
        """
        model = await self._get_for_tenant(job_id, tenant_id)
        if model is None:
            raise IngestionJobNotFoundError(f"Ingestion job {job_id} not found")
        if model.status != JobStatus.DEAD_LETTERED.value:
            raise JobNotDeadLetteredError(
                f"Ingestion job {job_id} is {model.status}, not dead-lettered"
            )

        model.status = JobStatus.PENDING.value
        model.attempts = 0
        model.next_attempt_at = None
        model.dead_lettered_at = None
        model.locked_at = None
        await self._session.flush()
        await self._notify(model.id)

        self._probe.job_redriven(model.id)
        return model.to_value_object()

    async def _get_for_tenant(
        self, job_id: str, tenant_id: str
    ) -> IngestionJobModel | None:
        stmt = (
            select(IngestionJobModel)
            .where(IngestionJobModel.id == job_id)
            .where(IngestionJobModel.tenant_id == tenant_id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _notify(self, job_id: str) -> None:
        if not self._notify_channel:
            return
        if self._session.get_bind().dialect.name != "postgresql":
            return
        # Delivered to listeners when the surrounding transaction commits
        await self._session.execute(
            text("SELECT pg_notify(:channel, :payload)"),
            {"channel": self._notify_channel, "payload": job_id},
        )
