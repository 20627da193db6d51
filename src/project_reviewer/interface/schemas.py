"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from project_reviewer.domain.entities import SizeCategory, Severity, TechnologyType


class ReviewRequest(BaseModel):
    """Request body for ``POST /reviews``."""

    project_path: str
    max_files: int | None = Field(default=None, ge=0, le=500)

    @field_validator("project_path")
    @classmethod
    def _must_not_be_empty(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "project_path must not be empty."
            raise ValueError(msg)
        return stripped


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class TechnologyOut(_FromDomain):
    name: str
    type: TechnologyType
    version: str | None = None


class IssueOut(_FromDomain):
    description: str
    severity: Severity
    impact: str
    code_snippet: str | None = None
    line_numbers: str | None = None


class StrengthOut(_FromDomain):
    description: str
    code_snippet: str | None = None
    line_numbers: str | None = None


class RecommendationOut(_FromDomain):
    description: str
    priority: Severity
    effort: Severity
    category: str


class FileReviewOut(_FromDomain):
    path: str
    quality_note: str
    issues: list[IssueOut]
    strengths: list[StrengthOut]
    recommendations: list[str]
    degraded: bool


class SizeOut(_FromDomain):
    total: int
    by_language: dict[str, int]
    category: SizeCategory


class IntroductionOut(_FromDomain):
    project_type: str
    purpose: str
    functionalities: list[str]
    technologies: list[TechnologyOut]
    structure_overview: str


class MiscellaneousOut(_FromDomain):
    size: SizeOut
    dependencies: list[TechnologyOut]


class ReviewReportResponse(_FromDomain):
    """Successful response from ``POST /reviews``."""

    introduction: IntroductionOut
    issues: list[IssueOut]
    strengths: list[StrengthOut]
    miscellaneous: MiscellaneousOut
    recommendations: list[RecommendationOut]
    file_reviews: list[FileReviewOut]
    skipped: dict[str, str]


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
