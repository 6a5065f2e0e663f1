"""Composition of the ingestion worker from settings.

Shared by the API lifespan (embedded worker) and the standalone
``folio-worker`` process.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.engines import build_async_url, build_listen_dsn, is_postgres
from infrastructure.settings import (
    AISettings,
    DatabaseSettings,
    IngestionSettings,
    get_ai_settings,
    get_database_settings,
    get_ingestion_settings,
)
from ingestion.application.pipeline import IngestionPipeline
from ingestion.dependencies.ingestion import get_document_store, retry_policy_from_settings
from ingestion.infrastructure.ai_structurer import OpenAIResumeStructurer
from ingestion.infrastructure.pdf_extractor import PdfTextExtractor
from ingestion.infrastructure.worker import IngestionWorker
from portfolios.infrastructure.portfolio_repository import PortfolioRepository
from portfolios.infrastructure.section_store import SectionStore


def build_ingestion_pipeline(
    session_factory: async_sessionmaker[AsyncSession],
    ai_settings: AISettings | None = None,
) -> IngestionPipeline:
    """Wire the pipeline with the PDF extractor and the configured model."""
    ai_settings = ai_settings or get_ai_settings()
    return IngestionPipeline(
        session_factory=session_factory,
        text_extractor=PdfTextExtractor(get_document_store()),
        structurer=OpenAIResumeStructurer(
            base_url=ai_settings.base_url,
            api_key=ai_settings.api_key.get_secret_value(),
            model=ai_settings.model,
            timeout_seconds=ai_settings.timeout_seconds,
            temperature=ai_settings.temperature,
        ),
        portfolio_repository_factory=PortfolioRepository,
        section_store_factory=SectionStore,
    )


def build_ingestion_worker(
    session_factory: async_sessionmaker[AsyncSession],
    settings: IngestionSettings | None = None,
    database_settings: DatabaseSettings | None = None,
) -> IngestionWorker:
    """Build a worker configured from ingestion and database settings.

    LISTEN/NOTIFY is used only on PostgreSQL; other databases rely on
    polling alone.
    """
    settings = settings or get_ingestion_settings()
    database_settings = database_settings or get_database_settings()

    listen_dsn = None
    if is_postgres(build_async_url(database_settings)):
        listen_dsn = build_listen_dsn(database_settings)

    return IngestionWorker(
        session_factory=session_factory,
        processor=build_ingestion_pipeline(session_factory),
        listen_dsn=listen_dsn,
        notify_channel=settings.notify_channel,
        poll_interval_seconds=settings.poll_interval_seconds,
        batch_size=settings.batch_size,
        concurrency=settings.concurrency,
        retry_policy=retry_policy_from_settings(settings),
        lease_seconds=settings.lease_seconds,
    )
