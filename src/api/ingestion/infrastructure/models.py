"""SQLAlchemy ORM model for the ingestion job queue."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin
from ingestion.domain.value_objects import IngestionJob, JobStatus


class IngestionJobModel(Base, TimestampMixin):
    """ORM model for ingestion_jobs table.

    Queue infrastructure, not tenant-owned data: the worker claims jobs of
    every tenant. The recorded ``tenant_id`` is what the job later
    resolves its tenant context from, and API reads filter on it
    explicitly.
    """

    __tablename__ = "ingestion_jobs"
    __table_args__ = (
        Index("ix_ingestion_jobs_status_next_attempt_at", "status", "next_attempt_at"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    portfolio_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    document_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=JobStatus.PENDING.value
    )
    attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_attempt_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    locked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    dead_lettered_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def to_value_object(self) -> IngestionJob:
        """Convert this ORM model to an IngestionJob value object."""
        return IngestionJob(
            id=self.id,
            tenant_id=self.tenant_id,
            portfolio_id=self.portfolio_id,
            document_ref=self.document_ref,
            status=JobStatus(self.status),
            attempts=self.attempts,
            last_error=self.last_error,
            next_attempt_at=self.next_attempt_at,
            created_at=self.created_at,
            completed_at=self.completed_at,
            dead_lettered_at=self.dead_lettered_at,
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<IngestionJobModel("
            f"id={self.id}, "
            f"status={self.status}, "
            f"attempts={self.attempts}"
            f")>"
        )
