"""Per-run JSON cache of intermediate results and the final report."""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def run_timestamp(now: datetime | None = None) -> str:
    """Folder name for a run, e.g. ``2025-03-01_14-05-09-123``."""
    now = now or datetime.now()
    return now.strftime("%Y-%m-%d_%H-%M-%S-") + f"{now.microsecond // 1000:03d}"


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums, tuples and sets into JSON-ready values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(to_jsonable(v) for v in value)
    return value


class RunCache:
    """Writes ``<cache_dir>/<timestamp>/<name>`` files for one run."""

    def __init__(self, cache_dir: str | Path, timestamp: str | None = None) -> None:
        self.timestamp = timestamp or run_timestamp()
        self.path = Path(cache_dir) / self.timestamp

    def save(self, name: str, data: Any) -> Path:
        target = self.path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(to_jsonable(data), indent=2), encoding="utf-8")
        logger.debug("Cached %s", target)
        return target
