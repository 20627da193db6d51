"""Oracle client — typed operations over the LLM gateway.

Every operation absorbs the unreliability of the model: a failed call or an
unusable response degrades to a typed fallback for that call only.  Partial
responses go through :func:`parse_partial` before giving up.  Nothing is
retried here and nothing raises past this module.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import Sequence, TypeVar

from pydantic import ValidationError

from project_reviewer.domain.entities import (
    KeyFileCandidate,
    ProjectClassification,
    ProjectTree,
    ReportSummary,
    ReviewOutcome,
)
from project_reviewer.domain.ports.llm_gateway import LlmGateway
from project_reviewer.services.oracle_schemas import (
    CodeReviewSchema,
    KeyFilesSchema,
    ProjectInfoSchema,
    OracleShape,
    RelatedFilesSchema,
    ReportSummarySchema,
)
from project_reviewer.services.response_parser import parse_partial
from project_reviewer.services.security_sentinel import sanitize_mapping

logger = logging.getLogger(__name__)

MAX_KEY_FILES = 20
MAX_RELATED_FILES = 5

ShapeT = TypeVar("ShapeT", bound=OracleShape)

# ── Prompt templates ────────────────────────────────────────────────────────

_JSON_INSTRUCTION = """

Return **only** a JSON object that validates against this JSON Schema:

{schema}
"""

CLASSIFY_SYSTEM_PROMPT = """\
You are an expert code analyzer.  Given the file structure of a project and \
the content of its configuration files, identify the project type, the \
technologies used (languages, frameworks, libraries, tools), the frameworks, \
and give a brief description of what the project is about.
Only mention technologies you see evidence of.
"""

RANK_SYSTEM_PROMPT = """\
You are an expert code analyzer.  Given the file structure of a project and \
information about its type and technologies, identify the most important \
files to review for a comprehensive code review.

For each file give an importance score (1-10, 10 is highest) and a brief \
reason.  Consider entry points, core business logic, configuration files and \
files likely to contain critical functionality or potential issues.
Use paths exactly as they appear in the structure.  Limit your response to \
the 20 most important files.
"""

REVIEW_SYSTEM_PROMPT = """\
You are an expert code reviewer.  Review the code file in the context of the \
project information provided.  Focus on code quality, commented-out code, \
architectural concerns, potential issues, best practices, security and \
performance.  Lines are prefixed with their line number; cite line ranges \
where relevant.
"""

RELATED_SYSTEM_PROMPT = """\
You are an expert code reviewer.  Based on the review of a file, suggest \
other files that are related and should be reviewed next.  Consider \
dependencies, imports and functional relationships between files.

Suggest up to 5 files, in order of importance.  Only include files that \
exist in the project structure, using their paths exactly as listed.  Do not \
suggest files that have already been reviewed.
"""

SUMMARY_SYSTEM_PROMPT = """\
You are an expert code analyst.  Generate a summarized report of the key \
aspects of the project from its information and per-file review results:
- Project purpose: what the project is designed to do
- Main functionalities: its key features or capabilities
- Issues: major issues identified across the codebase
- Strengths: major strengths identified across the codebase
- Recommendations: improvements with priority, effort and category
"""


def _system(prompt: str, shape: type[OracleShape]) -> str:
    return prompt + _JSON_INSTRUCTION.format(schema=shape.schema_hint())


def _classification_json(classification: ProjectClassification) -> str:
    return json.dumps(dataclasses.asdict(classification), indent=2)


# ── Degraded defaults ───────────────────────────────────────────────────────


def unknown_classification() -> ProjectClassification:
    return ProjectClassification(
        type="Unknown",
        description="Failed to analyze the project due to an error.",
    )


def failed_review(path: str) -> ReviewOutcome:
    return ReviewOutcome(
        path=path,
        quality_note="Unable to analyze due to an error",
        degraded=True,
    )


# ── Client ──────────────────────────────────────────────────────────────────


class OracleClient:
    """Typed request/response contract with the reasoning service."""

    def __init__(self, llm: LlmGateway) -> None:
        self._llm = llm

    # ── Operations ──────────────────────────────────────────────────────

    async def classify_project(
        self, tree: ProjectTree, config_files: dict[str, str]
    ) -> ProjectClassification:
        """Identify the project type and technologies."""
        cleaned, redactions = sanitize_mapping(config_files)
        if redactions:
            logger.warning("Redacted %d potential secret(s) from config files", redactions)

        config_parts = [
            f"File: {path}\n\n```\n{cleaned[path]}\n```" for path in sorted(cleaned)
        ]
        user_prompt = (
            "Project Structure (Directory Tree):\n"
            f"{tree.render()}\n\n"
            "Configuration Files:\n"
            + ("\n\n".join(config_parts) if config_parts else "(none found)")
        )

        parsed, recovered = await self._ask(
            ProjectInfoSchema, CLASSIFY_SYSTEM_PROMPT, user_prompt, "project type"
        )
        if parsed is None:
            return unknown_classification()
        if recovered:
            logger.info("Recovered a partial project classification")
        return parsed.to_domain()

    async def rank_key_files(
        self, tree: ProjectTree, classification: ProjectClassification
    ) -> list[KeyFileCandidate]:
        """Return up to 20 key files, in the order the oracle returned them."""
        user_prompt = (
            f"Project Information:\n{_classification_json(classification)}\n\n"
            f"Project Structure (Directory Tree):\n{tree.render()}"
        )
        parsed, _ = await self._ask(KeyFilesSchema, RANK_SYSTEM_PROMPT, user_prompt, "key files")
        if parsed is None:
            return []
        return [f.to_domain() for f in parsed.files[:MAX_KEY_FILES]]

    async def review_file(
        self, path: str, classification: ProjectClassification, content: str
    ) -> ReviewOutcome:
        """Review one file.  The returned outcome is always keyed to *path*."""
        user_prompt = (
            f"File Path: {path}\n\n"
            f"Project Information:\n{_classification_json(classification)}\n\n"
            f"Code Content:\n{content}"
        )
        parsed, _ = await self._ask(
            CodeReviewSchema, REVIEW_SYSTEM_PROMPT, user_prompt, f"review of {path}"
        )
        if parsed is None:
            return failed_review(path)
        return parsed.to_domain(path)

    async def suggest_related(
        self,
        path: str,
        outcome: ReviewOutcome,
        tree: ProjectTree,
        already_reviewed: Sequence[str],
    ) -> list[str]:
        """Return up to 5 paths the oracle thinks should be reviewed next."""
        user_prompt = (
            f"Current file being reviewed: {path}\n\n"
            f"Review results for this file:\n{json.dumps(dataclasses.asdict(outcome), indent=2)}\n\n"
            f"Project structure:\n{tree.render()}\n\n"
            f"Files already reviewed:\n{json.dumps(sorted(already_reviewed), indent=2)}"
        )
        parsed, _ = await self._ask(
            RelatedFilesSchema, RELATED_SYSTEM_PROMPT, user_prompt, f"files related to {path}"
        )
        if parsed is None:
            return []
        return parsed.files[:MAX_RELATED_FILES]

    async def summarize(
        self,
        classification: ProjectClassification,
        outcomes: Sequence[ReviewOutcome],
        fallback: ReportSummary,
    ) -> ReportSummary:
        """Synthesise the narrative sections; fields the oracle omits come from *fallback*."""
        user_prompt = (
            f"Project Information:\n{_classification_json(classification)}\n\n"
            "Review Results:\n"
            + json.dumps([dataclasses.asdict(o) for o in outcomes], indent=2)
        )
        parsed, _ = await self._ask(
            ReportSummarySchema, SUMMARY_SYSTEM_PROMPT, user_prompt, "summarized report"
        )
        if parsed is None:
            return dataclasses.replace(fallback, degraded=True)
        return parsed.to_domain(fallback)

    # ── Transport + recovery ────────────────────────────────────────────

    async def _ask(
        self,
        shape: type[ShapeT],
        system_prompt: str,
        user_prompt: str,
        context: str,
    ) -> tuple[ShapeT | None, bool]:
        """Call the model and validate its answer against *shape*.

        Returns ``(value, recovered)`` where *recovered* is True when the value
        came from best-effort parsing of a non-conforming response, and
        ``(None, False)`` when nothing usable was produced.
        """
        try:
            raw = await self._llm.complete(_system(system_prompt, shape), user_prompt)
        except Exception:
            logger.warning("Oracle call failed for %s", context, exc_info=True)
            return None, False

        try:
            return shape.model_validate_json(raw), False
        except ValidationError:
            logger.debug("Non-conforming oracle output for %s; attempting recovery", context)

        data = parse_partial(raw)
        if data is None:
            logger.warning("Unparseable oracle output for %s", context)
            return None, False

        try:
            value = shape.model_validate(data)
        except ValidationError as exc:
            logger.warning(
                "Oracle output for %s failed validation after recovery: %s",
                context,
                exc.error_count(),
            )
            return None, False

        logger.info("Successfully parsed partial output from oracle for %s", context)
        return value, True
