"""Pydantic response models for ingestion endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ingestion.domain.value_objects import IngestionJob


class UploadAcceptedResponse(BaseModel):
    """Acknowledgement that an upload was queued for processing."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    portfolio_id: str = Field(..., alias="portfolioId")
    job_id: str = Field(..., alias="jobId")


class IngestionJobResponse(BaseModel):
    """Processing state of one ingestion job."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    portfolio_id: str = Field(..., alias="portfolioId")
    status: str
    attempts: int
    last_error: str | None = Field(default=None, alias="lastError")
    next_attempt_at: datetime | None = Field(default=None, alias="nextAttemptAt")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")
    dead_lettered_at: datetime | None = Field(default=None, alias="deadLetteredAt")

    @classmethod
    def from_domain(cls, job: IngestionJob) -> IngestionJobResponse:
        return cls(
            id=job.id,
            portfolio_id=job.portfolio_id,
            status=job.status.value,
            attempts=job.attempts,
            last_error=job.last_error,
            next_attempt_at=job.next_attempt_at,
            created_at=job.created_at,
            completed_at=job.completed_at,
            dead_lettered_at=job.dead_lettered_at,
        )
