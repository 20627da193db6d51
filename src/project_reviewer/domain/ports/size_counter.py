"""Port: size counter — lines of code per language."""

from __future__ import annotations

from typing import Protocol

from project_reviewer.domain.entities import SizeReport


class SizeCounter(Protocol):
    """Abstract contract for measuring a project's size."""

    def count(self, root: str) -> SizeReport:
        """Return per-language line counts; never raises."""
        ...
