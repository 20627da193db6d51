"""Tests for the oracle client's typed contract and failure normalisation."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeGateway, as_json, path_in_prompt, tree_for
from project_reviewer.domain.entities import (
    ReportSummary,
    ReviewOutcome,
    Severity,
    TechnologyType,
)
from project_reviewer.domain.exceptions import LlmError
from project_reviewer.services.oracle_client import OracleClient


def _always(response):
    return FakeGateway(lambda op, prompt: response)


# ── classify_project ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_classify_project_parses_conforming_response(sample_project: Path) -> None:
    gateway = _always(
        as_json(
            {
                "type": "API Service",
                "technologies": [
                    {"name": "Python", "type": "language", "version": 3.11},
                    {"name": "FastAPI", "type": "Framework"},
                    {"name": "make", "type": "build-system"},
                ],
                "frameworks": [{"name": "FastAPI", "type": "framework"}],
                "description": "Serves things.",
            }
        )
    )
    result = await OracleClient(gateway).classify_project(
        tree_for(sample_project), {"requirements.txt": "fastapi\n"}
    )

    assert result.type == "API Service"
    assert [t.name for t in result.technologies] == ["Python", "FastAPI", "make"]
    assert result.technologies[0].version == "3.11"
    assert result.technologies[1].type is TechnologyType.FRAMEWORK
    assert result.technologies[2].type is TechnologyType.TOOL
    assert [t.name for t in result.dependencies] == ["FastAPI"]


@pytest.mark.asyncio
async def test_classify_project_degrades_on_failure(sample_project: Path) -> None:
    gateway = _always(LlmError("boom"))
    result = await OracleClient(gateway).classify_project(tree_for(sample_project), {})

    assert result.type == "Unknown"
    assert result.technologies == ()
    assert result.frameworks == ()
    assert "Failed to analyze" in result.description


@pytest.mark.asyncio
async def test_classify_project_recovers_from_wrapped_output(sample_project: Path) -> None:
    raw = (
        "Here is the analysis:\n```json\n"
        '{"type": "Library", "technologies": [{"name": "Rust", "type": "language"},],'
        ' "frameworks": [], "description": "A crate."}\n```\nThanks!'
    )
    result = await OracleClient(_always(raw)).classify_project(tree_for(sample_project), {})

    assert result.type == "Library"
    assert result.technologies[0].name == "Rust"


@pytest.mark.asyncio
async def test_classify_project_treats_nulls_as_missing(sample_project: Path) -> None:
    gateway = _always(
        as_json(
            {
                "type": "API Service",
                "technologies": [{"name": "Go", "type": "language", "version": None}],
                "frameworks": None,
                "description": None,
            }
        )
    )
    result = await OracleClient(gateway).classify_project(tree_for(sample_project), {})

    assert result.type == "API Service"
    assert [t.name for t in result.technologies] == ["Go"]
    assert result.frameworks == ()
    assert result.description == ""


@pytest.mark.asyncio
async def test_classification_is_idempotent(sample_project: Path) -> None:
    gateway = FakeGateway(
        lambda op, prompt: as_json({"type": f"T{len(prompt)}", "description": "d"})
    )
    client = OracleClient(gateway)
    tree = tree_for(sample_project)
    configs = {"requirements.txt": "fastapi\n", "package.json": "{}"}

    first = await client.classify_project(tree, configs)
    second = await client.classify_project(tree, dict(reversed(list(configs.items()))))

    assert first == second
    assert gateway.calls[0][1] == gateway.calls[1][1]


@pytest.mark.asyncio
async def test_classify_project_redacts_secrets_in_config(sample_project: Path) -> None:
    gateway = _always(as_json({"type": "App"}))
    await OracleClient(gateway).classify_project(
        tree_for(sample_project), {"docker-compose.yml": "password: hunter2hunter2\n"}
    )

    assert "hunter2hunter2" not in gateway.calls[0][1]
    assert "[REDACTED]" in gateway.calls[0][1]


# ── rank_key_files ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_rank_key_files_caps_and_clamps(sample_project: Path, classification) -> None:
    files = [{"path": f"f{i}.py", "importance": 15 - i, "reason": "r"} for i in range(25)]
    files.insert(0, {"importance": 10, "reason": "no path"})
    gateway = _always(as_json({"files": files}))

    result = await OracleClient(gateway).rank_key_files(tree_for(sample_project), classification)

    assert len(result) == 20
    assert result[0].path == "f0.py"
    assert result[0].importance == 10
    assert min(kf.importance for kf in result) >= 1


@pytest.mark.asyncio
async def test_rank_key_files_empty_on_garbage(sample_project: Path, classification) -> None:
    result = await OracleClient(_always("I cannot help with that.")).rank_key_files(
        tree_for(sample_project), classification
    )
    assert result == []


# ── review_file ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_review_file_keeps_requested_path(classification) -> None:
    gateway = _always(
        as_json(
            {
                "path": "somewhere/else.py",
                "codeQuality": "Good",
                "issues": [
                    {"description": "Unused import", "severity": "low", "impact": "noise",
                     "lineNumbers": 3},
                    {"severity": "HIGH"},
                ],
                "strengths": [{"description": "Small functions"}],
                "recommendations": ["Add tests", {"description": "Add docs"}],
            }
        )
    )
    outcome = await OracleClient(gateway).review_file("a.py", classification, "1 import os")

    assert outcome.path == "a.py"
    assert outcome.quality_note == "Good"
    assert len(outcome.issues) == 1
    assert outcome.issues[0].severity is Severity.LOW
    assert outcome.issues[0].line_numbers == "3"
    assert outcome.recommendations == ("Add tests", "Add docs")
    assert not outcome.degraded
    assert path_in_prompt(gateway.calls[0][1]) == "a.py"


@pytest.mark.asyncio
async def test_review_file_keeps_issues_when_fields_are_null(classification) -> None:
    gateway = _always(
        as_json(
            {
                "codeQuality": None,
                "issues": [
                    {"description": "SQL injection", "severity": "HIGH", "impact": None,
                     "codeSnippet": None},
                ],
                "strengths": None,
                "recommendations": None,
            }
        )
    )
    outcome = await OracleClient(gateway).review_file("db.py", classification, "")

    assert not outcome.degraded
    assert outcome.quality_note == "Unable to fully analyze"
    assert outcome.issues[0].description == "SQL injection"
    assert outcome.issues[0].severity is Severity.HIGH
    assert outcome.issues[0].impact == ""
    assert outcome.strengths == ()
    assert outcome.recommendations == ()


@pytest.mark.asyncio
async def test_review_file_degrades_with_path_preserved(classification) -> None:
    gateway = _always(RuntimeError("network down"))
    outcome = await OracleClient(gateway).review_file("pkg/core.py", classification, "")

    assert outcome.path == "pkg/core.py"
    assert outcome.degraded
    assert outcome.issues == ()
    assert outcome.strengths == ()
    assert outcome.recommendations == ()
    assert "Unable to analyze" in outcome.quality_note


@pytest.mark.asyncio
async def test_review_file_fills_missing_fields_from_partial_output(classification) -> None:
    raw = 'Sure. {"codeQuality": "Messy", "issues": [{"description": "Long function",}],}'
    outcome = await OracleClient(_always(raw)).review_file("b.py", classification, "")

    assert outcome.path == "b.py"
    assert outcome.quality_note == "Messy"
    assert outcome.issues[0].description == "Long function"
    assert outcome.issues[0].severity is Severity.MEDIUM
    assert outcome.strengths == ()


# ── suggest_related ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_suggest_related_caps_at_five(sample_project: Path) -> None:
    gateway = _always(as_json({"files": ["a.py", 3, "b.py", "c.py", "d.py", "e.py", "f.py"]}))
    outcome = ReviewOutcome(path="a.py", quality_note="ok")

    result = await OracleClient(gateway).suggest_related(
        "a.py", outcome, tree_for(sample_project), ["a.py"]
    )

    assert result == ["a.py", "b.py", "c.py", "d.py", "e.py"]


@pytest.mark.asyncio
async def test_suggest_related_empty_on_failure(sample_project: Path) -> None:
    outcome = ReviewOutcome(path="a.py", quality_note="ok")
    result = await OracleClient(_always(LlmError("x"))).suggest_related(
        "a.py", outcome, tree_for(sample_project), []
    )
    assert result == []


# ── summarize ───────────────────────────────────────────────────────────────


_FALLBACK = ReportSummary(purpose="fallback purpose", functionalities=("unknown",))


@pytest.mark.asyncio
async def test_summarize_merges_partial_fields(classification) -> None:
    raw = as_json(
        {
            "projectPurpose": "Reviews code.",
            "recommendations": [
                {"description": "Add CI", "priority": "high", "effort": "LOW", "category": "DevOps"}
            ],
        }
    )
    summary = await OracleClient(_always(raw)).summarize(classification, [], _FALLBACK)

    assert summary.purpose == "Reviews code."
    assert summary.functionalities == ("unknown",)
    assert summary.recommendations[0].priority is Severity.HIGH
    assert summary.recommendations[0].effort is Severity.LOW
    assert not summary.degraded


@pytest.mark.asyncio
async def test_summarize_falls_back_on_failure(classification) -> None:
    summary = await OracleClient(_always("not json at all")).summarize(
        classification, [], _FALLBACK
    )

    assert summary.purpose == "fallback purpose"
    assert summary.degraded
