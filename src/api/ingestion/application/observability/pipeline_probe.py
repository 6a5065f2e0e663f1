"""Protocols for ingestion application observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class IngestionPipelineProbe(Protocol):
    """Domain probe for the per-job ingestion pipeline."""

    def stage_started(self, job_id: str, stage: str) -> None:
        """Record that a job entered a pipeline stage."""
        ...

    def text_extracted(self, job_id: str, character_count: int) -> None:
        """Record how much text a document yielded."""
        ...

    def resume_structured(
        self, job_id: str, experience_count: int, project_count: int
    ) -> None:
        """Record the shape of the structured resume."""
        ...

    def sections_replaced(self, job_id: str, portfolio_id: str, generation: int) -> None:
        """Record that the portfolio shows the new sections."""
        ...

    def with_context(self, context: ObservationContext) -> IngestionPipelineProbe:
        """Create a new probe with observation context bound."""
        ...


class IngestionServiceProbe(Protocol):
    """Domain probe for upload submission and job administration."""

    def resume_submitted(self, portfolio_id: str, job_id: str, size: int) -> None:
        """Record that an upload was accepted for processing."""
        ...

    def upload_rejected(self, portfolio_id: str, reason: str) -> None:
        """Record that an upload was refused."""
        ...

    def job_redriven(self, job_id: str) -> None:
        """Record that a dead-lettered job was requeued."""
        ...

    def with_context(self, context: ObservationContext) -> IngestionServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultIngestionPipelineProbe:
    """Default implementation of IngestionPipelineProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultIngestionPipelineProbe:
        """Create a new probe with observation context bound."""
        return DefaultIngestionPipelineProbe(logger=self._logger, context=context)

    def stage_started(self, job_id: str, stage: str) -> None:
        self._logger.debug(
            "ingestion_stage_started",
            job_id=job_id,
            stage=stage,
            **self._get_context_kwargs(),
        )

    def text_extracted(self, job_id: str, character_count: int) -> None:
        self._logger.info(
            "ingestion_text_extracted",
            job_id=job_id,
            character_count=character_count,
            **self._get_context_kwargs(),
        )

    def resume_structured(
        self, job_id: str, experience_count: int, project_count: int
    ) -> None:
        self._logger.info(
            "ingestion_resume_structured",
            job_id=job_id,
            experience_count=experience_count,
            project_count=project_count,
            **self._get_context_kwargs(),
        )

    def sections_replaced(self, job_id: str, portfolio_id: str, generation: int) -> None:
        self._logger.info(
            "ingestion_sections_replaced",
            job_id=job_id,
            portfolio_id=portfolio_id,
            generation=generation,
            **self._get_context_kwargs(),
        )


class DefaultIngestionServiceProbe:
    """Default implementation of IngestionServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultIngestionServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultIngestionServiceProbe(logger=self._logger, context=context)

    def resume_submitted(self, portfolio_id: str, job_id: str, size: int) -> None:
        self._logger.info(
            "resume_submitted",
            portfolio_id=portfolio_id,
            job_id=job_id,
            size=size,
            **self._get_context_kwargs(),
        )

    def upload_rejected(self, portfolio_id: str, reason: str) -> None:
        self._logger.warning(
            "resume_upload_rejected",
            portfolio_id=portfolio_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def job_redriven(self, job_id: str) -> None:
        self._logger.info(
            "ingestion_job_redrive_requested",
            job_id=job_id,
            **self._get_context_kwargs(),
        )
