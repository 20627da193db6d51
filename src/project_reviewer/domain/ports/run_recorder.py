"""Port: run recorder — persists a run's intermediate results for operators."""

from __future__ import annotations

from typing import Any, Protocol

PROJECT_STRUCTURE = "project_structure.json"
PROJECT_INFO = "project_info.json"
KEY_FILES = "key_files.json"
REVIEW_LEDGER = "review_results.json"
PROJECT_SIZE = "project_size.json"
FINAL_REPORT = "report.json"


class RunRecorder(Protocol):
    """Write-once-per-run side channel; the ledger entry is overwritten incrementally."""

    def save(self, name: str, data: Any) -> Any:
        """Persist *data* under *name*."""
        ...
