"""Per-job ingestion pipeline.

A job runs through four stages:

- consuming: the job acts as its own tenant resolver, opening a
  TenantContext for the tenant recorded on the job, and the portfolio is
  looked up through the tenant-restricted path
- extracting: the stored document is turned into plain text
- structuring: the model turns the text into a StructuredResume
- replacing: the resume's sections atomically replace the portfolio's

Any stage may raise; the worker records the outcome on the job.
"""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.tenant_scoping import open_tenant_session
from ingestion.application.observability import (
    DefaultIngestionPipelineProbe,
    IngestionPipelineProbe,
)
from ingestion.domain.resume import ResumeFormatError, StructuredResume
from ingestion.domain.value_objects import IngestionJob
from ingestion.ports.exceptions import PortfolioMissingError, StructuringError
from ingestion.ports.services import ResumeStructurer, TextExtractor
from portfolios.domain.value_objects import PortfolioId
from portfolios.ports.exceptions import PortfolioNotFoundError
from portfolios.ports.repositories import IPortfolioRepository, ISectionStore
from shared_kernel.middleware.tenant_context import TenantContext
from shared_kernel.observability_context import ObservationContext


class IngestionPipeline:
    """Turns one ingestion job into a portfolio's sections."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        text_extractor: TextExtractor,
        structurer: ResumeStructurer,
        portfolio_repository_factory: Callable[[AsyncSession], IPortfolioRepository],
        section_store_factory: Callable[[AsyncSession], ISectionStore],
        probe: IngestionPipelineProbe | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            session_factory: Tenant-scoped session factory
            text_extractor: Extracts text from stored documents
            structurer: Calls the model that structures resume text
            portfolio_repository_factory: Builds a portfolio repository on a session
            section_store_factory: Builds a section store on a session
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._text_extractor = text_extractor
        self._structurer = structurer
        self._portfolio_repository_factory = portfolio_repository_factory
        self._section_store_factory = section_store_factory
        self._probe = probe or DefaultIngestionPipelineProbe()

    async def run(self, job: IngestionJob) -> int:
        """Process ``job`` end to end.

        Returns:
            The section generation now live on the portfolio

        Raises:
            PortfolioMissingError: The portfolio no longer exists in its tenant
            ExtractionError: The document could not be read as text
            StructuringError: The model call failed or returned no resume
            ReplacePersistenceError: The new sections could not be committed
        """
        context = TenantContext.for_tenant(job.tenant_id, source="job")
        probe = self._probe.with_context(
            ObservationContext(tenant_id=job.tenant_id, extra={"job_id": job.id})
        )
        portfolio_id = PortfolioId(value=job.portfolio_id)

        probe.stage_started(job.id, "consuming")
        async with open_tenant_session(self._session_factory, context) as session:
            repository = self._portfolio_repository_factory(session)
            if not await repository.exists(portfolio_id):
                raise PortfolioMissingError(
                    f"Portfolio {job.portfolio_id} does not exist"
                )

        probe.stage_started(job.id, "extracting")
        text = await self._text_extractor.extract(job.document_ref)
        probe.text_extracted(job.id, len(text))

        probe.stage_started(job.id, "structuring")
        raw = await self._structurer.structure(text)
        try:
            resume = StructuredResume.from_json(raw)
        except ResumeFormatError as e:
            raise StructuringError(str(e)) from e
        probe.resume_structured(job.id, len(resume.experience), len(resume.projects))

        probe.stage_started(job.id, "replacing")
        async with open_tenant_session(self._session_factory, context) as session:
            store = self._section_store_factory(session)
            try:
                generation = await store.replace(portfolio_id, resume.to_sections())
            except PortfolioNotFoundError as e:
                raise PortfolioMissingError(
                    f"Portfolio {job.portfolio_id} was deleted during ingestion"
                ) from e

        probe.sections_replaced(job.id, job.portfolio_id, generation)
        return generation
