"""``cloc`` adapter — implements the SizeCounter port."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess

from project_reviewer.domain.entities import SizeReport

logger = logging.getLogger(__name__)

_SUMMARY_KEYS = frozenset({"header", "SUM"})


def parse_cloc_json(output: str) -> dict[str, int]:
    """Return ``{language: code_lines}`` from ``cloc --json`` output.

    Raises
    ------
    ValueError
        If *output* is not a JSON object.
    """
    data = json.loads(output)
    if not isinstance(data, dict):
        raise ValueError("cloc output is not a JSON object")

    counts: dict[str, int] = {}
    for language, stats in data.items():
        if language in _SUMMARY_KEYS or not isinstance(stats, dict):
            continue
        code = stats.get("code", 0)
        if isinstance(code, int):
            counts[language] = code
    return counts


class ClocSizeCounter:
    """Count lines of code with the ``cloc`` CLI; zero report when unavailable."""

    def __init__(self, executable: str = "cloc", timeout: float = 300.0) -> None:
        self._executable = executable
        self._timeout = timeout

    def count(self, root: str) -> SizeReport:
        if shutil.which(self._executable) is None:
            logger.warning("%s is not installed; reporting zero project size", self._executable)
            return SizeReport()

        try:
            proc = subprocess.run(
                [self._executable, root, "--json", "--quiet"],
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=True,
            )
            counts = parse_cloc_json(proc.stdout)
        except (OSError, subprocess.SubprocessError, ValueError) as exc:
            logger.warning("Error getting project size: %s", exc)
            return SizeReport()

        report = SizeReport.from_counts(counts)
        logger.info("Project size: %d lines (%s)", report.total, report.category.value)
        return report
