"""Ports (interfaces) for the ingestion bounded context."""

from ingestion.ports.exceptions import (
    DocumentRejectedError,
    ExtractionError,
    IngestionError,
    IngestionJobNotFoundError,
    JobNotDeadLetteredError,
    PortfolioMissingError,
    StructuringError,
)
from ingestion.ports.services import (
    DocumentStore,
    IIngestionJobQueue,
    ResumeStructurer,
    TextExtractor,
)

__all__ = [
    "DocumentRejectedError",
    "DocumentStore",
    "ExtractionError",
    "IIngestionJobQueue",
    "IngestionError",
    "IngestionJobNotFoundError",
    "JobNotDeadLetteredError",
    "PortfolioMissingError",
    "ResumeStructurer",
    "StructuringError",
    "TextExtractor",
]
