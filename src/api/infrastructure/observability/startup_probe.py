"""Domain probe for application startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during application initialization and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def application_started(self, version: str) -> None:
        """Record that the application finished starting."""
        ...

    def schema_created(self, table_count: int) -> None:
        """Record that missing tables were created at startup."""
        ...

    def embedded_worker_started(self) -> None:
        """Record that the ingestion worker runs inside the API process."""
        ...

    def application_stopping(self) -> None:
        """Record that the application is shutting down."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def application_started(self, version: str) -> None:
        """Record that the application finished starting."""
        self._logger.info(
            "application_started",
            version=version,
            **self._get_context_kwargs(),
        )

    def schema_created(self, table_count: int) -> None:
        """Record that missing tables were created at startup."""
        self._logger.info(
            "database_schema_created",
            table_count=table_count,
            **self._get_context_kwargs(),
        )

    def embedded_worker_started(self) -> None:
        """Record that the ingestion worker runs inside the API process."""
        self._logger.info(
            "embedded_ingestion_worker_started",
            **self._get_context_kwargs(),
        )

    def application_stopping(self) -> None:
        """Record that the application is shutting down."""
        self._logger.info(
            "application_stopping",
            **self._get_context_kwargs(),
        )
