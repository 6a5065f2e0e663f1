"""Domain-Oriented Observability for the ingestion application layer."""

from ingestion.application.observability.pipeline_probe import (
    DefaultIngestionPipelineProbe,
    DefaultIngestionServiceProbe,
    IngestionPipelineProbe,
    IngestionServiceProbe,
)

__all__ = [
    "IngestionPipelineProbe",
    "DefaultIngestionPipelineProbe",
    "IngestionServiceProbe",
    "DefaultIngestionServiceProbe",
]
