"""Application services for the ingestion bounded context."""

from ingestion.application.services.ingestion_service import IngestionService

__all__ = ["IngestionService"]
