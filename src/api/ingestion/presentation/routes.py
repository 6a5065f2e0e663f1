"""HTTP routes for resume upload and ingestion administration.

Uploads are acknowledged as soon as the job is queued; the portfolio's
sections change when the worker finishes.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from iam.application.value_objects import CurrentUser
from iam.dependencies.user import get_current_user
from ingestion.application.services import IngestionService
from ingestion.dependencies.ingestion import get_ingestion_service
from ingestion.ports.exceptions import (
    DocumentRejectedError,
    IngestionJobNotFoundError,
    JobNotDeadLetteredError,
)
from ingestion.presentation.models import IngestionJobResponse, UploadAcceptedResponse
from portfolios.ports.exceptions import PortfolioNotFoundError
from portfolios.presentation.routes import parse_portfolio_id, portfolio_not_found

router = APIRouter(tags=["ingestion"])


@router.post(
    "/portfolios/{portfolio_id}/upload-resume",
    status_code=status.HTTP_202_ACCEPTED,
)
async def upload_resume(
    portfolio_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IngestionService, Depends(get_ingestion_service)],
    file: Annotated[UploadFile, File(description="Resume as PDF")],
) -> UploadAcceptedResponse:
    """Queue a PDF resume for ingestion into the portfolio.

    Raises:
        HTTPException: 400 if the file is empty, too large or not a PDF
        HTTPException: 404 if the tenant has no such portfolio
    """
    parsed_id = parse_portfolio_id(portfolio_id)
    # One byte past the limit is enough to reject an oversized upload
    data = await file.read(service.max_upload_bytes + 1)

    try:
        job = await service.submit_resume(parsed_id, data)
    except DocumentRejectedError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": DocumentRejectedError.code, "message": str(e)},
        ) from e
    except PortfolioNotFoundError as e:
        raise portfolio_not_found(portfolio_id) from e

    return UploadAcceptedResponse(
        message="Resume uploaded. Processing has started.",
        portfolio_id=portfolio_id,
        job_id=job.id,
    )


@router.get("/portfolios/{portfolio_id}/ingestion")
async def get_ingestion_status(
    portfolio_id: str,
    service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> IngestionJobResponse:
    """Get the latest ingestion job of a portfolio."""
    try:
        job = await service.latest_job(parse_portfolio_id(portfolio_id))
    except PortfolioNotFoundError as e:
        raise portfolio_not_found(portfolio_id) from e

    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "code": IngestionJobNotFoundError.code,
                "message": f"Portfolio {portfolio_id} has no ingestion jobs",
            },
        )
    return IngestionJobResponse.from_domain(job)


@router.get("/ingestion/dead-letters")
async def list_dead_letters(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IngestionService, Depends(get_ingestion_service)],
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[IngestionJobResponse]:
    """List the tenant's dead-lettered jobs, most recent first."""
    jobs = await service.list_dead_letters(limit=limit)
    return [IngestionJobResponse.from_domain(job) for job in jobs]


@router.post("/ingestion/jobs/{job_id}/redrive")
async def redrive_job(
    job_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> IngestionJobResponse:
    """Return a dead-lettered job to the queue.

    Raises:
        HTTPException: 404 if the tenant has no such job
        HTTPException: 409 if the job is not dead-lettered
    """
    try:
        job = await service.redrive(job_id)
    except IngestionJobNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": IngestionJobNotFoundError.code, "message": str(e)},
        ) from e
    except JobNotDeadLetteredError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": JobNotDeadLetteredError.code, "message": str(e)},
        ) from e

    return IngestionJobResponse.from_domain(job)
