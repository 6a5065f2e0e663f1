"""Observability probes for the ingestion queue and worker.

Following Domain Oriented Observability, probes capture domain-significant
events without cluttering queue and worker logic with logging concerns.
"""

from __future__ import annotations

from typing import Protocol

import structlog


class IngestionQueueProbe(Protocol):
    """Protocol for ingestion queue observability."""

    def job_published(self, job_id: str, tenant_id: str, portfolio_id: str) -> None:
        """Called when an upload becomes a pending job."""
        ...

    def jobs_claimed(self, count: int) -> None:
        """Called when the worker leases a batch of jobs."""
        ...

    def job_retry_scheduled(self, job_id: str, attempts: int, error: str) -> None:
        """Called when a failed job is scheduled for another attempt."""
        ...

    def job_dead_lettered(self, job_id: str, attempts: int, error: str) -> None:
        """Called when a job will not be retried."""
        ...

    def job_redriven(self, job_id: str) -> None:
        """Called when a dead-lettered job is returned to the queue."""
        ...


class IngestionWorkerProbe(Protocol):
    """Protocol for ingestion worker observability."""

    def worker_started(self) -> None:
        """Called when the worker starts."""
        ...

    def worker_stopped(self) -> None:
        """Called when the worker stops."""
        ...

    def listen_loop_started(self, channel: str) -> None:
        """Called when the LISTEN loop starts."""
        ...

    def listen_loop_error(self, error: str) -> None:
        """Called when the LISTEN loop fails; polling continues."""
        ...

    def poll_loop_started(self) -> None:
        """Called when the poll loop starts."""
        ...

    def poll_loop_error(self, error: str) -> None:
        """Called when an error occurs in the poll loop."""
        ...

    def job_succeeded(self, job_id: str, tenant_id: str) -> None:
        """Called when a job's outcome has been committed."""
        ...

    def job_failed(self, job_id: str, error: str, retryable: bool) -> None:
        """Called when a job raised during processing."""
        ...


class DefaultIngestionQueueProbe:
    """Default implementation of IngestionQueueProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger or structlog.get_logger()

    def job_published(self, job_id: str, tenant_id: str, portfolio_id: str) -> None:
        self._logger.info(
            "ingestion_job_published",
            job_id=job_id,
            tenant_id=tenant_id,
            portfolio_id=portfolio_id,
        )

    def jobs_claimed(self, count: int) -> None:
        self._logger.debug("ingestion_jobs_claimed", count=count)

    def job_retry_scheduled(self, job_id: str, attempts: int, error: str) -> None:
        self._logger.warning(
            "ingestion_job_retry_scheduled",
            job_id=job_id,
            attempts=attempts,
            error=error,
        )

    def job_dead_lettered(self, job_id: str, attempts: int, error: str) -> None:
        self._logger.error(
            "ingestion_job_dead_lettered",
            job_id=job_id,
            attempts=attempts,
            error=error,
        )

    def job_redriven(self, job_id: str) -> None:
        self._logger.info("ingestion_job_redriven", job_id=job_id)


class DefaultIngestionWorkerProbe:
    """Default implementation of IngestionWorkerProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger or structlog.get_logger()

    def worker_started(self) -> None:
        self._logger.info("ingestion_worker_started")

    def worker_stopped(self) -> None:
        self._logger.info("ingestion_worker_stopped")

    def listen_loop_started(self, channel: str) -> None:
        self._logger.info("ingestion_listen_loop_started", channel=channel)

    def listen_loop_error(self, error: str) -> None:
        self._logger.warning("ingestion_listen_loop_error", error=error)

    def poll_loop_started(self) -> None:
        self._logger.info("ingestion_poll_loop_started")

    def poll_loop_error(self, error: str) -> None:
        self._logger.error("ingestion_poll_loop_error", error=error)

    def job_succeeded(self, job_id: str, tenant_id: str) -> None:
        self._logger.info(
            "ingestion_job_succeeded",
            job_id=job_id,
            tenant_id=tenant_id,
        )

    def job_failed(self, job_id: str, error: str, retryable: bool) -> None:
        self._logger.warning(
            "ingestion_job_failed",
            job_id=job_id,
            error=error,
            retryable=retryable,
        )
