"""Value objects for the ingestion domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from ulid import ULID


class JobStatus(StrEnum):
    """Lifecycle of an ingestion job.

    ``pending -> processing -> done``, or ``processing -> failed`` and back
    to ``processing`` on retry, ending in ``dead_lettered`` once retries are
    exhausted or the failure cannot succeed on retry.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"
    DEAD_LETTERED = "dead_lettered"


@dataclass(frozen=True)
class IngestionEvent:
    """Request to turn an uploaded document into portfolio sections.

    Carries no tenant: the publisher records the tenant of the request
    that raised the event.
    """

    portfolio_id: str
    document_ref: str


@dataclass(frozen=True)
class IngestionJob:
    """A durable unit of ingestion work."""

    id: str
    tenant_id: str
    portfolio_id: str
    document_ref: str
    status: JobStatus
    attempts: int = 0
    last_error: str | None = None
    next_attempt_at: datetime | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None
    dead_lettered_at: datetime | None = None

    @staticmethod
    def new_id() -> str:
        return str(ULID())


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for failed jobs.

    The n-th failed attempt is retried after ``base * 2**(n-1)`` seconds,
    capped at ``backoff_max_seconds``. A job that has made
    ``max_attempts`` attempts is dead-lettered instead.
    """

    max_attempts: int = 5
    backoff_base_seconds: float = 30
    backoff_max_seconds: float = 3600

    def backoff(self, attempts: int) -> timedelta:
        exponent = max(attempts - 1, 0)
        seconds = min(
            self.backoff_base_seconds * (2**exponent), self.backoff_max_seconds
        )
        return timedelta(seconds=seconds)

    def should_dead_letter(self, attempts: int, retryable: bool) -> bool:
        return not retryable or attempts >= self.max_attempts
