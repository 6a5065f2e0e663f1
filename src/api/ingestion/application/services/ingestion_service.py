"""Ingestion application service.

Accepts resume uploads for a portfolio of the resolved tenant and exposes
job status and dead-letter administration to that tenant.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from ingestion.application.observability import (
    DefaultIngestionServiceProbe,
    IngestionServiceProbe,
)
from ingestion.domain.value_objects import IngestionEvent, IngestionJob
from ingestion.ports.exceptions import DocumentRejectedError
from ingestion.ports.services import DocumentStore, IIngestionJobQueue
from portfolios.domain.value_objects import PortfolioId
from portfolios.ports.exceptions import PortfolioNotFoundError
from portfolios.ports.repositories import IPortfolioRepository
from shared_kernel.middleware.tenant_context import TenantContext

PDF_MAGIC = b"%PDF-"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class IngestionService:
    """Application service for resume ingestion."""

    def __init__(
        self,
        queue: IIngestionJobQueue,
        document_store: DocumentStore,
        portfolio_repository: IPortfolioRepository,
        session: AsyncSession,
        tenant_context: TenantContext,
        probe: IngestionServiceProbe | None = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self._queue = queue
        self._document_store = document_store
        self._portfolio_repository = portfolio_repository
        self._session = session
        self._tenant_context = tenant_context
        self._probe = probe or DefaultIngestionServiceProbe()
        self._max_upload_bytes = max_upload_bytes

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    async def submit_resume(self, portfolio_id: PortfolioId, data: bytes) -> IngestionJob:
        """Store an uploaded resume and enqueue it for ingestion.

        The job is published in the same transaction that confirmed the
        portfolio belongs to the request tenant.

        Args:
            portfolio_id: Target portfolio
            data: Raw PDF bytes

        Returns:
            The pending job

        Raises:
            DocumentRejectedError: If the upload is empty, too large or not a PDF
            PortfolioNotFoundError: If the tenant has no such portfolio
        """
        self._check_document(portfolio_id, data)

        document_ref = None
        try:
            async with self._session.begin():
                if not await self._portfolio_repository.exists(portfolio_id):
                    raise PortfolioNotFoundError(f"Portfolio {portfolio_id} not found")

                document_ref = await self._document_store.save(portfolio_id.value, data)
                job = await self._queue.publish(
                    IngestionEvent(
                        portfolio_id=portfolio_id.value, document_ref=document_ref
                    ),
                    tenant_id=self._tenant_context.tenant_id,
                )
        except Exception:
            # No job will ever read a document whose publish was rolled back
            if document_ref is not None:
                await self._document_store.delete(document_ref)
            raise

        self._probe.resume_submitted(portfolio_id.value, job.id, len(data))
        return job

    async def latest_job(self, portfolio_id: PortfolioId) -> IngestionJob | None:
        """Most recent ingestion job of a portfolio.

        Raises:
            PortfolioNotFoundError: If the tenant has no such portfolio
        """
        if not await self._portfolio_repository.exists(portfolio_id):
            raise PortfolioNotFoundError(f"Portfolio {portfolio_id} not found")
        return await self._queue.latest_for_portfolio(
            portfolio_id.value, self._tenant_context.tenant_id
        )

    async def list_dead_letters(self, limit: int = 100) -> list[IngestionJob]:
        """Dead-lettered jobs of the resolved tenant."""
        return await self._queue.list_dead_lettered(
            self._tenant_context.tenant_id, limit=limit
        )

    async def redrive(self, job_id: str) -> IngestionJob:
        """Requeue a dead-lettered job of the resolved tenant.

        Raises:
            IngestionJobNotFoundError: If the tenant has no such job
            JobNotDeadLetteredError: If the job is not dead-lettered
        """
        async with self._session.begin():
            job = await self._queue.redrive(job_id, self._tenant_context.tenant_id)
        self._probe.job_redriven(job.id)
        return job

    def _check_document(self, portfolio_id: PortfolioId, data: bytes) -> None:
        reason = None
        if not data:
            reason = "File is empty"
        elif len(data) > self._max_upload_bytes:
            reason = f"File exceeds {self._max_upload_bytes} bytes"
        elif not data.startswith(PDF_MAGIC):
            reason = "File is not a PDF"

        if reason is not None:
            self._probe.upload_rejected(portfolio_id.value, reason)
            raise DocumentRejectedError(reason)
