from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from project_reviewer.domain.entities import (
    ProjectClassification,
    ProjectTree,
    ReviewOutcome,
    SizeReport,
    Technology,
    TechnologyType,
)
from project_reviewer.infrastructure.local_structure_provider import LocalStructureProvider
from project_reviewer.services.oracle_client import (
    CLASSIFY_SYSTEM_PROMPT,
    RANK_SYSTEM_PROMPT,
    RELATED_SYSTEM_PROMPT,
    REVIEW_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
)
from project_reviewer.services.tree_builder import build_tree

_OPERATIONS = [
    ("classify", CLASSIFY_SYSTEM_PROMPT),
    ("rank", RANK_SYSTEM_PROMPT),
    ("review", REVIEW_SYSTEM_PROMPT),
    ("related", RELATED_SYSTEM_PROMPT),
    ("summary", SUMMARY_SYSTEM_PROMPT),
]


def operation_of(system_prompt: str) -> str:
    for name, prompt in _OPERATIONS:
        if system_prompt.startswith(prompt):
            return name
    raise AssertionError("unknown system prompt")


def path_in_prompt(user_prompt: str) -> str:
    """Extract the file path an oracle request is about."""
    first = user_prompt.splitlines()[0]
    return first.split(": ", 1)[1]


Handler = Callable[[str, str], "str | Exception"]


class FakeGateway:
    """``LlmGateway`` test double driven by a ``(operation, user_prompt)`` handler."""

    def __init__(self, handler: Handler) -> None:
        self._handler = handler
        self.calls: list[tuple[str, str]] = []

    async def complete(
        self, system_prompt: str, user_prompt: str, *, json_mode: bool = True
    ) -> str:
        operation = operation_of(system_prompt)
        self.calls.append((operation, user_prompt))
        result = self._handler(operation, user_prompt)
        if isinstance(result, Exception):
            raise result
        return result

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]


class ScriptedOracle:
    """Stand-in for :class:`OracleClient` used by the exploration engine tests."""

    def __init__(
        self,
        suggestions: dict[str, list[str]] | None = None,
        on_review: Callable[[str], None] | None = None,
    ) -> None:
        self._suggestions = suggestions or {}
        self._on_review = on_review
        self.reviewed: list[str] = []
        self.suggest_calls: list[tuple[str, list[str]]] = []

    async def review_file(
        self, path: str, classification: ProjectClassification, content: str
    ) -> ReviewOutcome:
        self.reviewed.append(path)
        if self._on_review is not None:
            self._on_review(path)
        return ReviewOutcome(path=path, quality_note=f"reviewed {path}")

    async def suggest_related(
        self, path: str, outcome: ReviewOutcome, tree: ProjectTree, already_reviewed: list[str]
    ) -> list[str]:
        self.suggest_calls.append((path, list(already_reviewed)))
        return list(self._suggestions.get(path, []))


class FakeStructureProvider:
    def __init__(self, files: list[str] | Exception) -> None:
        self._files = files
        self.calls = 0

    def list_files(self, root: str) -> list[str]:
        self.calls += 1
        if isinstance(self._files, Exception):
            raise self._files
        return list(self._files)


class FakeSizeCounter:
    def __init__(self, report: SizeReport | None = None) -> None:
        self._report = report or SizeReport.from_counts({"Python": 120})

    def count(self, root: str) -> SizeReport:
        return self._report


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")


def tree_for(root: Path) -> ProjectTree:
    return build_tree(str(root), LocalStructureProvider().list_files(str(root)))


def as_json(data: Any) -> str:
    return json.dumps(data)


@pytest.fixture
def classification() -> ProjectClassification:
    return ProjectClassification(
        type="CLI Tool",
        technologies=(
            Technology(name="Python", type=TechnologyType.LANGUAGE),
            Technology(name="FastAPI", type=TechnologyType.FRAMEWORK),
            Technology(name="requests", type=TechnologyType.LIBRARY, version="2.31"),
            Technology(name="pytest", type=TechnologyType.TOOL),
        ),
        description="A small command line tool.",
    )


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    write_files(
        tmp_path,
        {
            "a.py": "import b\nprint('a')\n",
            "b.py": "import c\n",
            "c.py": "VALUE = 1\n",
            "d.py": "VALUE = 2\n",
            "pkg/__init__.py": "",
            "pkg/core.py": "def run():\n    return 42\n",
            "requirements.txt": "fastapi==0.110\nrequests==2.31\n",
        },
    )
    return tmp_path
