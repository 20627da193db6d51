"""Pydantic response shapes for every oracle call.

The JSON Schema of each model is embedded in the request as the
structured-output hint.  Validation is lenient: unknown enum values are
coerced and missing collections default to empty, so a partially
conforming response still yields a usable value.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from project_reviewer.domain.entities import (
    Issue,
    KeyFileCandidate,
    ProjectClassification,
    Recommendation,
    ReportSummary,
    ReviewOutcome,
    Severity,
    Strength,
    Technology,
    TechnologyType,
)


def _coerce_level(value: Any) -> str:
    text = str(value or "").strip().upper()
    return text if text in Severity.__members__ else Severity.MEDIUM.value


def _described_items(value: Any) -> Any:
    """Drop list entries that are not objects with a string description."""
    if not isinstance(value, list):
        return value
    return [
        item
        for item in value
        if isinstance(item, dict) and isinstance(item.get("description"), str)
    ]


class OracleShape(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _nulls_take_defaults(cls, data: Any) -> Any:
        # A JSON null means "not provided": the field falls back to its default.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @classmethod
    def schema_hint(cls) -> str:
        return json.dumps(cls.model_json_schema(), indent=2)


class TechnologySchema(OracleShape):
    name: str = Field(description="The name of the technology")
    version: str | None = Field(default=None, description="The version if available")
    type: TechnologyType = Field(
        default=TechnologyType.TOOL,
        description="One of language, framework, library, tool",
    )

    @field_validator("type", mode="before")
    @classmethod
    def _lower_type(cls, v: Any) -> str:
        text = str(v or "").strip().lower()
        valid = {t.value for t in TechnologyType}
        return text if text in valid else TechnologyType.TOOL.value

    @field_validator("version", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str | None:
        return None if v is None else str(v)

    def to_domain(self) -> Technology:
        return Technology(name=self.name, type=self.type, version=self.version)


class ProjectInfoSchema(OracleShape):
    type: str = Field(
        default="Unknown",
        description="The project type (e.g. 'Web Application', 'CLI Tool', 'API Service')",
    )
    technologies: list[TechnologySchema] = Field(
        default_factory=list, description="Technologies used in the project"
    )
    frameworks: list[TechnologySchema] = Field(
        default_factory=list, description="Frameworks used in the project"
    )
    description: str = Field(default="", description="What the project does")

    @field_validator("technologies", "frameworks", mode="before")
    @classmethod
    def _named_items(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        items: list[dict[str, Any]] = []
        for item in v:
            if isinstance(item, str):
                items.append({"name": item})
            elif isinstance(item, dict) and isinstance(item.get("name"), str):
                items.append(item)
        return items

    def to_domain(self) -> ProjectClassification:
        return ProjectClassification(
            type=self.type,
            technologies=tuple(t.to_domain() for t in self.technologies),
            frameworks=tuple(
                Technology(name=f.name, type=TechnologyType.FRAMEWORK, version=f.version)
                for f in self.frameworks
            ),
            description=self.description,
        )


class KeyFileSchema(OracleShape):
    path: str = Field(description="Path to the file relative to the project root")
    importance: int = Field(default=5, description="Importance from 1-10, 10 is highest")
    reason: str = Field(default="", description="Why this file is important to review")

    @field_validator("importance", mode="before")
    @classmethod
    def _clamp(cls, v: Any) -> int:
        try:
            number = int(round(float(v)))
        except (TypeError, ValueError):
            return 5
        return max(1, min(10, number))

    def to_domain(self) -> KeyFileCandidate:
        return KeyFileCandidate(path=self.path, importance=self.importance, reason=self.reason)


class KeyFilesSchema(OracleShape):
    files: list[KeyFileSchema] = Field(
        default_factory=list, description="Key files to review, at most 20"
    )

    @field_validator("files", mode="before")
    @classmethod
    def _drop_pathless(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        return [i for i in v if isinstance(i, dict) and isinstance(i.get("path"), str)]


class IssueSchema(OracleShape):
    description: str = Field(description="Description of the issue")
    code_snippet: str | None = Field(default=None, alias="codeSnippet")
    line_numbers: str | None = Field(default=None, alias="lineNumbers")
    severity: Severity = Field(default=Severity.MEDIUM, description="HIGH, MEDIUM or LOW")
    impact: str = Field(default="", description="The potential impact")

    @field_validator("severity", mode="before")
    @classmethod
    def _level(cls, v: Any) -> str:
        return _coerce_level(v)

    @field_validator("line_numbers", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str | None:
        return None if v is None else str(v)

    def to_domain(self) -> Issue:
        return Issue(
            description=self.description,
            severity=self.severity,
            impact=self.impact,
            code_snippet=self.code_snippet,
            line_numbers=self.line_numbers,
        )


class StrengthSchema(OracleShape):
    description: str = Field(description="A strength or good practice")
    code_snippet: str | None = Field(default=None, alias="codeSnippet")
    line_numbers: str | None = Field(default=None, alias="lineNumbers")

    @field_validator("line_numbers", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str | None:
        return None if v is None else str(v)

    def to_domain(self) -> Strength:
        return Strength(
            description=self.description,
            code_snippet=self.code_snippet,
            line_numbers=self.line_numbers,
        )


class CodeReviewSchema(OracleShape):
    path: str | None = Field(default=None, description="Path of the reviewed file")
    code_quality: str = Field(
        default="Unable to fully analyze",
        alias="codeQuality",
        description="Brief assessment of the overall code quality",
    )
    issues: list[IssueSchema] = Field(default_factory=list)
    strengths: list[StrengthSchema] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("issues", "strengths", mode="before")
    @classmethod
    def _drop_undescribed(cls, v: Any) -> Any:
        return _described_items(v)

    @field_validator("recommendations", mode="before")
    @classmethod
    def _flatten_recommendations(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        flat: list[str] = []
        for item in v:
            if isinstance(item, str):
                flat.append(item)
            elif isinstance(item, dict) and isinstance(item.get("description"), str):
                flat.append(item["description"])
        return flat

    def to_domain(self, requested_path: str) -> ReviewOutcome:
        # The requested path wins: dedup and ledger indexing depend on it.
        return ReviewOutcome(
            path=requested_path,
            quality_note=self.code_quality,
            issues=tuple(i.to_domain() for i in self.issues),
            strengths=tuple(s.to_domain() for s in self.strengths),
            recommendations=tuple(self.recommendations),
        )


class RelatedFilesSchema(OracleShape):
    files: list[str] = Field(
        default_factory=list, description="Related files to review next, at most 5"
    )

    @field_validator("files", mode="before")
    @classmethod
    def _strings_only(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        return [i for i in v if isinstance(i, str) and i.strip()]


class RecommendationSchema(OracleShape):
    description: str
    priority: Severity = Severity.MEDIUM
    effort: Severity = Severity.MEDIUM
    category: str = "General"

    @field_validator("priority", "effort", mode="before")
    @classmethod
    def _levels(cls, v: Any) -> str:
        return _coerce_level(v)

    def to_domain(self) -> Recommendation:
        return Recommendation(
            description=self.description,
            priority=self.priority,
            effort=self.effort,
            category=self.category,
        )


class ReportSummarySchema(OracleShape):
    project_purpose: str | None = Field(default=None, alias="projectPurpose")
    main_functionalities: list[str] | None = Field(default=None, alias="mainFunctionalities")
    issues: list[IssueSchema] | None = None
    strengths: list[StrengthSchema] | None = None
    recommendations: list[RecommendationSchema] | None = None

    @field_validator("issues", "strengths", "recommendations", mode="before")
    @classmethod
    def _drop_undescribed(cls, v: Any) -> Any:
        return _described_items(v)

    def to_domain(self, fallback: ReportSummary) -> ReportSummary:
        """Merge the fields present in this response over *fallback*."""
        return ReportSummary(
            purpose=self.project_purpose or fallback.purpose,
            functionalities=(
                tuple(self.main_functionalities)
                if self.main_functionalities is not None
                else fallback.functionalities
            ),
            issues=(
                tuple(i.to_domain() for i in self.issues)
                if self.issues is not None
                else fallback.issues
            ),
            strengths=(
                tuple(s.to_domain() for s in self.strengths)
                if self.strengths is not None
                else fallback.strengths
            ),
            recommendations=(
                tuple(r.to_domain() for r in self.recommendations)
                if self.recommendations is not None
                else fallback.recommendations
            ),
            degraded=self.project_purpose is None,
        )
