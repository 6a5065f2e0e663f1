"""FastAPI dependencies for resume ingestion."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import get_write_session
from infrastructure.dependencies import get_request_tenant_context
from infrastructure.settings import IngestionSettings, get_ingestion_settings
from ingestion.application.observability import (
    DefaultIngestionServiceProbe,
    IngestionServiceProbe,
)
from ingestion.application.services import IngestionService
from ingestion.domain.value_objects import RetryPolicy
from ingestion.infrastructure.document_store import LocalDocumentStore
from ingestion.infrastructure.queue import IngestionJobQueue
from portfolios.dependencies.portfolio import get_portfolio_repository
from portfolios.infrastructure.portfolio_repository import PortfolioRepository
from shared_kernel.middleware.tenant_context import TenantContext


def retry_policy_from_settings(settings: IngestionSettings) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.max_attempts,
        backoff_base_seconds=settings.backoff_base_seconds,
        backoff_max_seconds=settings.backoff_max_seconds,
    )


@lru_cache
def get_document_store() -> LocalDocumentStore:
    """Get application-scoped document store (singleton)."""
    return LocalDocumentStore(get_ingestion_settings().upload_dir)


def get_ingestion_service_probe() -> IngestionServiceProbe:
    """Get IngestionServiceProbe instance."""
    return DefaultIngestionServiceProbe()


def get_ingestion_queue(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> IngestionJobQueue:
    """Get the job queue bound to the request session."""
    settings = get_ingestion_settings()
    return IngestionJobQueue(
        session,
        retry_policy=retry_policy_from_settings(settings),
        lease_seconds=settings.lease_seconds,
        notify_channel=settings.notify_channel,
    )


def get_ingestion_service(
    queue: Annotated[IngestionJobQueue, Depends(get_ingestion_queue)],
    document_store: Annotated[LocalDocumentStore, Depends(get_document_store)],
    portfolio_repository: Annotated[
        PortfolioRepository, Depends(get_portfolio_repository)
    ],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    tenant_context: Annotated[TenantContext, Depends(get_request_tenant_context)],
    probe: Annotated[IngestionServiceProbe, Depends(get_ingestion_service_probe)],
    settings: Annotated[IngestionSettings, Depends(get_ingestion_settings)],
) -> IngestionService:
    """Get IngestionService instance for the current request."""
    return IngestionService(
        queue=queue,
        document_store=document_store,
        portfolio_repository=portfolio_repository,
        session=session,
        tenant_context=tenant_context,
        probe=probe,
        max_upload_bytes=settings.max_upload_bytes,
    )
