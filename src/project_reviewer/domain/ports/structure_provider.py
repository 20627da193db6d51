"""Port: project structure provider — lists the files of a local project."""

from __future__ import annotations

from typing import Protocol


class StructureProvider(Protocol):
    """Abstract contract for enumerating a project's files."""

    def list_files(self, root: str) -> list[str]:
        """Return absolute paths of every non-excluded file under *root*."""
        ...
