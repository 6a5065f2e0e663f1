"""Unit test fixtures.

Database-backed unit tests run against an in-memory SQLite database
created per test, through the same tenant-scoped session factory the
application uses.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import timedelta
from typing import Annotated
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from iam.dependencies.tenant_context import (
    TenantResolutionMiddleware,
    tenant_error_response,
)
from iam.domain.aggregates import Tenant
from iam.infrastructure.tenant_repository import TenantRepository
from iam.presentation import router as iam_router
from infrastructure.database.dependencies import get_write_session
from infrastructure.database.schema import create_schema
from infrastructure.database.tenant_scoping import (
    create_tenant_sessionmaker,
    open_tenant_session,
)
from infrastructure.dependencies import get_request_tenant_context, get_token_service
from ingestion.dependencies.ingestion import get_document_store
from ingestion.infrastructure.document_store import LocalDocumentStore
from ingestion.presentation import router as ingestion_router
from portfolios.presentation import router as portfolios_router
from shared_kernel.auth import TokenService
from shared_kernel.middleware.tenant_context import TenantContext, TenantContextError

TEST_JWT_SECRET = "unit-test-secret-that-is-long-enough-0123"


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Provide an in-memory database with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Provide the tenant-scoped session factory bound to the test database."""
    return create_tenant_sessionmaker(sqlite_engine)


@pytest.fixture
def create_tenant(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Tenant]]:
    """Provide a helper that persists a tenant and returns it."""

    async def _create(slug: str, name: str | None = None, active: bool = True) -> Tenant:
        tenant = Tenant.create(name=name or slug.title(), slug=slug)
        if not active:
            tenant.deactivate()
        async with open_tenant_session(session_factory, TenantContext()) as session:
            async with session.begin():
                await TenantRepository(session).save(tenant)
        return tenant

    return _create


@pytest.fixture
def token_service() -> TokenService:
    """Provide a token service with a fixed test secret."""
    return TokenService(
        secret=TEST_JWT_SECRET,
        issuer="folio-test",
        audience="folio-test-client",
        expiration=timedelta(minutes=30),
    )


@pytest.fixture
def mock_session() -> Mock:
    """Mock AsyncSession whose ``begin()`` works as an async context manager."""
    session = Mock(spec=AsyncSession)

    ctx_manager = AsyncMock()
    ctx_manager.__aenter__ = AsyncMock(return_value=None)
    ctx_manager.__aexit__ = AsyncMock(return_value=None)

    session.begin = Mock(return_value=ctx_manager)
    return session


@pytest.fixture
def document_store(tmp_path) -> LocalDocumentStore:
    """Provide a document store writing under a temporary directory."""
    return LocalDocumentStore(tmp_path / "uploads")


@pytest.fixture
def api_app(
    session_factory: async_sessionmaker[AsyncSession],
    token_service: TokenService,
    document_store: LocalDocumentStore,
) -> FastAPI:
    """Provide the API with tenant resolution and every router, on SQLite."""
    app = FastAPI()
    app.add_middleware(
        TenantResolutionMiddleware,
        session_factory=session_factory,
        token_service=token_service,
    )

    @app.exception_handler(TenantContextError)
    async def _handle_tenant_error(request, exc: TenantContextError):
        return tenant_error_response(exc)

    app.include_router(iam_router)
    app.include_router(portfolios_router)
    app.include_router(ingestion_router)

    async def _write_session(
        tenant_context: Annotated[TenantContext, Depends(get_request_tenant_context)],
    ) -> AsyncGenerator[AsyncSession, None]:
        async with open_tenant_session(session_factory, tenant_context) as session:
            yield session

    app.dependency_overrides[get_write_session] = _write_session
    app.dependency_overrides[get_token_service] = lambda: token_service
    app.dependency_overrides[get_document_store] = lambda: document_store
    return app


@pytest_asyncio.fixture
async def api_client(api_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide an HTTP client for ``api_app``."""
    async with AsyncClient(
        transport=ASGITransport(app=api_app), base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def register_user(
    api_client: AsyncClient,
) -> Callable[..., Awaitable[dict]]:
    """Provide a helper that registers a user over HTTP and returns the auth body."""

    async def _register(
        tenant_slug: str, email: str, password: str = "s3cure-passw0rd"
    ) -> dict:
        response = await api_client.post(
            "/api/auth/register",
            json={
                "email": email,
                "fullName": "Test User",
                "password": password,
                "tenantIdentifier": tenant_slug,
            },
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _register


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(lines: list[str]) -> bytes:
    """Build a single-page PDF whose text layer holds ``lines``."""
    text_ops = " 0 -16 Td ".join(f"({_pdf_escape(line)}) Tj" for line in lines)
    stream = f"BT /F1 12 Tf 72 720 Td {text_ops} ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_offset
    return bytes(out)


@pytest.fixture
def make_pdf() -> Callable[[list[str]], bytes]:
    """Provide ``build_pdf`` for tests that need real PDF bytes."""
    return build_pdf
