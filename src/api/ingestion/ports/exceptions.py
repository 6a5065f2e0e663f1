"""Exceptions for the ingestion bounded context.

Every pipeline failure states whether retrying it could succeed. The
worker records non-retryable failures as dead letters straight away.
"""


class IngestionError(Exception):
    """Base class for failures while processing an ingestion job."""

    code = "INGESTION_FAILED"
    retryable = False

    def __init__(self, message: str, retryable: bool | None = None):
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class ExtractionError(IngestionError):
    """The document is missing, unreadable or has no text."""

    code = "EXTRACTION_FAILED"


class StructuringError(IngestionError):
    """The AI call failed or returned something that is not a resume.

    Transport failures and 5xx responses are retryable; malformed output
    is not.
    """

    code = "STRUCTURING_FAILED"


class PortfolioMissingError(IngestionError):
    """The job's portfolio no longer exists in its tenant."""

    code = "PORTFOLIO_MISSING"


class DocumentRejectedError(Exception):
    """An upload is empty or not a PDF."""

    code = "INVALID_DOCUMENT"


class IngestionJobNotFoundError(Exception):
    """No job with this id exists in the resolved tenant."""

    code = "INGESTION_JOB_NOT_FOUND"


class JobNotDeadLetteredError(Exception):
    """Only dead-lettered jobs can be redriven."""

    code = "JOB_NOT_DEAD_LETTERED"
