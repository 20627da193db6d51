"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class TechnologyType(str, Enum):
    LANGUAGE = "language"
    FRAMEWORK = "framework"
    LIBRARY = "library"
    TOOL = "tool"


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class SizeCategory(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"


class SkipReason(str, Enum):
    """Why an admitted path produced no review."""

    MISSING = "missing"
    DIRECTORY = "directory"
    TOO_LARGE = "too_large"
    UNREADABLE = "unreadable"


class LedgerEventKind(str, Enum):
    DISCOVERED = "discovered"
    ADMITTED = "admitted"
    REVIEWED = "reviewed"
    SKIPPED = "skipped"
    REJECTED = "rejected"


# ── Project structure ──────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FileNode:
    """A file or directory in the project tree. The root has ``path == ""``."""

    path: str
    kind: NodeKind
    size: int | None = None
    children: tuple[FileNode, ...] = ()

    @property
    def is_file(self) -> bool:
        return self.kind is NodeKind.FILE


@dataclass(frozen=True, slots=True)
class ProjectTree:
    """Immutable snapshot of a project's file/directory structure."""

    root_path: str
    root: FileNode
    file_paths: frozenset[str] = frozenset()

    def contains(self, path: str) -> bool:
        return path in self.file_paths

    def iter_files(self) -> Iterator[FileNode]:
        """Yield file nodes depth-first, in tree order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            if node.is_file:
                yield node
            else:
                stack.extend(reversed(node.children))

    def render(self) -> str:
        """Render the tree as an indented ``├──`` listing."""
        lines: list[str] = []

        def _walk(node: FileNode, indent: str) -> None:
            if node.is_file:
                lines.append(f"{indent}├── {node.path}")
                return
            if node.path:
                lines.append(f"{indent}├── {node.path}/")
                indent += "│   "
            for child in node.children:
                _walk(child, indent)

        _walk(self.root, "")
        return "\n".join(lines)


# ── Oracle results ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Technology:
    name: str
    type: TechnologyType = TechnologyType.TOOL
    version: str | None = None


@dataclass(frozen=True, slots=True)
class ProjectClassification:
    """What kind of project this is; produced once per run."""

    type: str
    technologies: tuple[Technology, ...] = ()
    frameworks: tuple[Technology, ...] = ()
    description: str = ""

    @property
    def dependencies(self) -> tuple[Technology, ...]:
        """Technologies tagged as a library or framework."""
        return tuple(
            t
            for t in self.technologies
            if t.type in (TechnologyType.LIBRARY, TechnologyType.FRAMEWORK)
        )


@dataclass(frozen=True, slots=True)
class KeyFileCandidate:
    """A file the oracle ranked as worth reviewing."""

    path: str
    importance: int
    reason: str = ""


@dataclass(frozen=True, slots=True)
class Issue:
    description: str
    severity: Severity = Severity.MEDIUM
    impact: str = ""
    code_snippet: str | None = None
    line_numbers: str | None = None


@dataclass(frozen=True, slots=True)
class Strength:
    description: str
    code_snippet: str | None = None
    line_numbers: str | None = None


@dataclass(frozen=True, slots=True)
class ReviewOutcome:
    """The review of a single file. ``degraded`` marks a fallback value."""

    path: str
    quality_note: str
    issues: tuple[Issue, ...] = ()
    strengths: tuple[Strength, ...] = ()
    recommendations: tuple[str, ...] = ()
    degraded: bool = False
    sequence: int = 0


@dataclass(frozen=True, slots=True)
class Recommendation:
    description: str
    priority: Severity = Severity.MEDIUM
    effort: Severity = Severity.MEDIUM
    category: str = "General"


@dataclass(frozen=True, slots=True)
class ReportSummary:
    """Narrative sections synthesised by the oracle for the final report."""

    purpose: str
    functionalities: tuple[str, ...] = ()
    issues: tuple[Issue, ...] = ()
    strengths: tuple[Strength, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()
    degraded: bool = False


# ── Size ────────────────────────────────────────────────────────────────────

_MEDIUM_THRESHOLD = 1_000
_LARGE_THRESHOLD = 10_000


@dataclass(frozen=True, slots=True)
class SizeReport:
    total: int = 0
    by_language: dict[str, int] = field(default_factory=dict)
    category: SizeCategory = SizeCategory.SMALL

    @staticmethod
    def category_for(total: int) -> SizeCategory:
        if total < _MEDIUM_THRESHOLD:
            return SizeCategory.SMALL
        if total <= _LARGE_THRESHOLD:
            return SizeCategory.MEDIUM
        return SizeCategory.LARGE

    @classmethod
    def from_counts(cls, by_language: dict[str, int]) -> SizeReport:
        total = sum(by_language.values())
        return cls(total=total, by_language=dict(by_language), category=cls.category_for(total))


# ── Run ledger ──────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class LedgerEvent:
    """One decision taken by the exploration engine."""

    sequence: int
    kind: LedgerEventKind
    path: str
    reason: str = ""


# ── Final report ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Introduction:
    project_type: str
    purpose: str
    functionalities: tuple[str, ...]
    technologies: tuple[Technology, ...]
    structure_overview: str


@dataclass(frozen=True, slots=True)
class Miscellaneous:
    size: SizeReport
    dependencies: tuple[Technology, ...]


@dataclass(frozen=True, slots=True)
class FinalReport:
    """The structured output of a complete review run."""

    introduction: Introduction
    issues: tuple[Issue, ...]
    strengths: tuple[Strength, ...]
    miscellaneous: Miscellaneous
    recommendations: tuple[Recommendation, ...]
    file_reviews: tuple[ReviewOutcome, ...] = ()
    skipped: dict[str, str] = field(default_factory=dict)
