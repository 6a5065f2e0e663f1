"""Ports for the ingestion pipeline and its queue."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ingestion.domain.value_objects import IngestionEvent, IngestionJob


@runtime_checkable
class DocumentStore(Protocol):
    """Durable storage for uploaded documents."""

    async def save(self, portfolio_id: str, data: bytes) -> str:
        """Store a document and return its reference."""
        ...

    async def read(self, document_ref: str) -> bytes:
        """Read a stored document.

        Raises:
            ExtractionError: If the reference names no stored document
        """
        ...

    async def delete(self, document_ref: str) -> None:
        """Remove a stored document; a missing one is ignored."""
        ...


@runtime_checkable
class TextExtractor(Protocol):
    async def extract(self, document_ref: str) -> str:
        """Extract plain text from a stored document.

        Raises:
            ExtractionError: If the document is missing, unreadable or empty
        """
        ...


@runtime_checkable
class ResumeStructurer(Protocol):
    async def structure(self, text: str) -> str:
        """Ask the model to structure resume text; returns its raw output.

        Raises:
            StructuringError: If the model could not be reached or answered
                with an error
        """
        ...


@runtime_checkable
class IIngestionJobQueue(Protocol):
    """Durable, at-least-once queue of ingestion jobs.

    Operations run inside the caller's transaction.
    """

    async def publish(self, event: IngestionEvent, tenant_id: str) -> IngestionJob:
        ...

    async def claim(self, limit: int) -> list[IngestionJob]:
        """Lease up to ``limit`` due jobs for processing."""
        ...

    async def mark_done(self, job_id: str) -> None:
        ...

    async def mark_failed(
        self, job_id: str, error: str, retryable: bool
    ) -> IngestionJob | None:
        """Record a failure; schedules a retry or dead-letters the job."""
        ...

    async def get(self, job_id: str, tenant_id: str) -> IngestionJob | None:
        ...

    async def latest_for_portfolio(
        self, portfolio_id: str, tenant_id: str
    ) -> IngestionJob | None:
        ...

    async def list_dead_lettered(
        self, tenant_id: str, limit: int = 100
    ) -> list[IngestionJob]:
        ...

    async def redrive(self, job_id: str, tenant_id: str) -> IngestionJob:
        """Return a dead-lettered job to the queue with a fresh attempt budget.

        Raises:
            IngestionJobNotFoundError: If the tenant has no such job
            JobNotDeadLetteredError: If the job is not dead-lettered
        """
        ...
