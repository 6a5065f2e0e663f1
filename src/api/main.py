"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from iam.dependencies.tenant_context import (
    TenantResolutionMiddleware,
    tenant_error_response,
)
from iam.presentation import router as iam_router
from infrastructure.database.dependencies import (
    close_database_connections,
    get_engine,
    get_session_factory,
)
from infrastructure.database.schema import create_schema
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import (
    get_database_settings,
    get_ingestion_settings,
    get_settings,
)
from infrastructure.version import __version__
from ingestion.dependencies.worker import build_ingestion_worker
from ingestion.infrastructure.worker import IngestionWorker
from ingestion.presentation import router as ingestion_router
from portfolios.presentation import router as portfolios_router
from shared_kernel.middleware.tenant_context import TenantContextError


@asynccontextmanager
async def folio_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Table creation when FOLIO_DB_CREATE_SCHEMA is set
    - The embedded ingestion worker when FOLIO_INGESTION_WORKER_ENABLED is set
    - Engine disposal on shutdown
    """
    configure_logging(get_settings().log_level)
    probe = DefaultStartupProbe()

    if get_database_settings().create_schema:
        table_count = await create_schema(get_engine())
        probe.schema_created(table_count=table_count)

    worker: IngestionWorker | None = None
    if get_ingestion_settings().worker_enabled:
        worker = build_ingestion_worker(get_session_factory())
        await worker.start()
        probe.embedded_worker_started()

    app.state.ingestion_worker = worker
    probe.application_started(version=__version__)

    try:
        yield
    finally:
        probe.application_stopping()
        if worker is not None:
            await worker.stop()
        await close_database_connections()


app = FastAPI(
    title="Folio API",
    description="Multi-tenant portfolio hosting with resume ingestion",
    version=__version__,
    lifespan=folio_lifespan,
)

app.add_middleware(TenantResolutionMiddleware)


@app.exception_handler(TenantContextError)
async def handle_tenant_error(request: Request, exc: TenantContextError) -> JSONResponse:
    """Render tenant errors raised below the middleware."""
    return tenant_error_response(exc)


app.include_router(iam_router)
app.include_router(portfolios_router)
app.include_router(ingestion_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
