"""HTTP routes; each one delegates straight to the use case."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from project_reviewer.domain.ports.run_recorder import RunRecorder
from project_reviewer.interface.dependencies import get_recorder, get_use_case
from project_reviewer.interface.schemas import (
    ErrorResponse,
    HealthResponse,
    ReviewReportResponse,
    ReviewRequest,
)
from project_reviewer.services.review_project import ReviewProjectUseCase

router = APIRouter()


@router.get("/health", response_model=HealthResponse, include_in_schema=False)
async def health() -> HealthResponse:
    return HealthResponse()


@router.post(
    "/reviews",
    response_model=ReviewReportResponse,
    responses={
        422: {"model": ErrorResponse, "description": "Not a directory, or no reviewable files"},
        500: {"model": ErrorResponse, "description": "The project could not be listed"},
    },
)
async def create_review(
    body: ReviewRequest,
    use_case: ReviewProjectUseCase = Depends(get_use_case),
    recorder: RunRecorder | None = Depends(get_recorder),
) -> ReviewReportResponse:
    """Review the project at ``project_path`` on the server's filesystem."""
    report = await use_case.execute(body.project_path, max_files=body.max_files, recorder=recorder)
    return ReviewReportResponse.model_validate(report)
