"""Unit tests for the FastAPI application and its lifespan."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from main import app, folio_lifespan


@pytest.fixture
def lifespan_patches():
    """Patch everything the lifespan touches outside the process."""
    database_settings = MagicMock(create_schema=False)
    ingestion_settings = MagicMock(worker_enabled=False)
    worker = Mock()
    worker.start = AsyncMock()
    worker.stop = AsyncMock()

    with (
        patch("main.configure_logging") as configure_logging,
        patch("main.get_settings", return_value=MagicMock(log_level="INFO")),
        patch("main.get_database_settings", return_value=database_settings),
        patch("main.get_ingestion_settings", return_value=ingestion_settings),
        patch("main.get_engine") as get_engine,
        patch("main.get_session_factory") as get_session_factory,
        patch("main.create_schema", AsyncMock(return_value=4)) as create_schema,
        patch("main.build_ingestion_worker", return_value=worker) as build_worker,
        patch("main.close_database_connections", AsyncMock()) as close_connections,
    ):
        yield MagicMock(
            database_settings=database_settings,
            ingestion_settings=ingestion_settings,
            worker=worker,
            configure_logging=configure_logging,
            get_engine=get_engine,
            get_session_factory=get_session_factory,
            create_schema=create_schema,
            build_worker=build_worker,
            close_connections=close_connections,
        )


class TestApplication:
    """Tests for the application object."""

    @pytest.mark.asyncio
    async def test_health_needs_no_tenant(self):
        """The health check is exempt from tenant resolution."""
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_routers_are_registered(self):
        """Every bounded context contributes its routes."""
        paths = {route.path for route in app.routes}

        assert {
            "/api/tenants",
            "/api/auth/register",
            "/api/auth/login",
            "/api/portfolios",
            "/api/portfolios/{portfolio_id}/upload-resume",
            "/api/portfolios/{portfolio_id}/ingestion",
            "/api/ingestion/dead-letters",
            "/api/ingestion/jobs/{job_id}/redrive",
        } <= paths


class TestLifespan:
    """Tests for folio_lifespan."""

    @pytest.mark.asyncio
    async def test_plain_startup_and_shutdown(self, lifespan_patches):
        """Without schema creation or worker the lifespan only logs and cleans up."""
        test_app = FastAPI(lifespan=folio_lifespan)

        async with LifespanManager(test_app):
            assert test_app.state.ingestion_worker is None

        lifespan_patches.configure_logging.assert_called_once_with("INFO")
        lifespan_patches.create_schema.assert_not_awaited()
        lifespan_patches.build_worker.assert_not_called()
        lifespan_patches.close_connections.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_creates_schema_when_enabled(self, lifespan_patches):
        """FOLIO_DB_CREATE_SCHEMA creates tables on the shared engine."""
        lifespan_patches.database_settings.create_schema = True
        test_app = FastAPI(lifespan=folio_lifespan)

        async with LifespanManager(test_app):
            pass

        lifespan_patches.create_schema.assert_awaited_once_with(
            lifespan_patches.get_engine.return_value
        )

    @pytest.mark.asyncio
    async def test_runs_embedded_worker_when_enabled(self, lifespan_patches):
        """The embedded worker starts with the app and stops before the engine closes."""
        lifespan_patches.ingestion_settings.worker_enabled = True
        test_app = FastAPI(lifespan=folio_lifespan)

        async with LifespanManager(test_app):
            assert test_app.state.ingestion_worker is lifespan_patches.worker
            lifespan_patches.worker.start.assert_awaited_once()
            lifespan_patches.worker.stop.assert_not_awaited()

        lifespan_patches.build_worker.assert_called_once_with(
            lifespan_patches.get_session_factory.return_value
        )
        lifespan_patches.worker.stop.assert_awaited_once()
        lifespan_patches.close_connections.assert_awaited_once()
