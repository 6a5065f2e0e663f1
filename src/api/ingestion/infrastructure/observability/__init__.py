"""Observability probes for ingestion infrastructure."""

from ingestion.infrastructure.observability.worker_probe import (
    DefaultIngestionQueueProbe,
    DefaultIngestionWorkerProbe,
    IngestionQueueProbe,
    IngestionWorkerProbe,
)

__all__ = [
    "IngestionQueueProbe",
    "DefaultIngestionQueueProbe",
    "IngestionWorkerProbe",
    "DefaultIngestionWorkerProbe",
]
