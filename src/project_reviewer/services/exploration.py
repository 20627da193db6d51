"""Exploration engine — bounded, deduplicated, breadth-first file review.

The engine seeds a FIFO frontier with the oracle's ranked key files, then
repeatedly admits the head of the frontier, reviews it, asks the oracle for
related files and appends the new candidates to the tail.  It stops when the
frontier is empty, the review budget is spent, or the run is cancelled.

Budget is consumed when a path is *admitted*, before the on-disk validity
check, so a frontier full of bad paths still terminates.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from project_reviewer.domain.entities import (
    KeyFileCandidate,
    LedgerEventKind,
    ProjectClassification,
    ProjectTree,
    SkipReason,
)
from project_reviewer.domain.exceptions import ContentExtractionError
from project_reviewer.services.file_content import render_file_content
from project_reviewer.services.oracle_client import OracleClient
from project_reviewer.services.run_ledger import RunLedger
from project_reviewer.services.tree_builder import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_BUDGET = 50
DEFAULT_MAX_FILE_SIZE_BYTES = 1_000_000

# ── Rejection reasons for suggested paths ───────────────────────────────────

REJECT_NOT_IN_TREE = "not_in_tree"
REJECT_VISITED = "visited"
REJECT_QUEUED = "queued"


def order_seeds(key_files: Sequence[KeyFileCandidate]) -> list[str]:
    """Return seed paths by importance descending, ties kept in oracle order."""
    ranked = sorted(key_files, key=lambda kf: kf.importance, reverse=True)
    paths = (normalize_path(kf.path) for kf in ranked)
    return [p for p in paths if p]


# ── State ───────────────────────────────────────────────────────────────────


@dataclass
class ExplorationState:
    """Frontier, visited set and budget of one run.

    Callers that run workers concurrently must hold a single lock around
    :meth:`admit_next` and :meth:`offer`.
    """

    budget: int
    frontier: deque[str] = field(default_factory=deque)
    visited: set[str] = field(default_factory=set)
    _queued: set[str] = field(default_factory=set, init=False, repr=False)

    @property
    def exhausted(self) -> bool:
        return len(self.visited) >= self.budget

    def enqueue(self, path: str) -> str | None:
        """Append *path* unless already visited or queued; return the rejection reason."""
        if path in self.visited:
            return REJECT_VISITED
        if path in self._queued:
            return REJECT_QUEUED
        self.frontier.append(path)
        self._queued.add(path)
        return None

    def offer(self, path: str, tree: ProjectTree) -> str | None:
        """Enqueue a suggested path, rejecting anything absent from *tree*."""
        if not path or not tree.contains(path):
            return REJECT_NOT_IN_TREE
        return self.enqueue(path)

    def admit_next(self) -> str | None:
        """Pop the frontier head and mark it visited, consuming one budget unit.

        Returns *None* when the budget is spent or the frontier is empty.
        """
        while self.frontier and not self.exhausted:
            path = self.frontier.popleft()
            self._queued.discard(path)
            if path in self.visited:
                continue
            self.visited.add(path)
            return path
        return None


@dataclass
class ExplorationResult:
    ledger: RunLedger
    state: ExplorationState
    cancelled: bool = False


# ── Engine ──────────────────────────────────────────────────────────────────


class ExplorationEngine:
    """Drives the review loop for one project.

    Parameters
    ----------
    oracle:
        Client used for ``review_file`` and ``suggest_related``.
    budget:
        Maximum number of distinct paths admitted for review.
    max_file_size_bytes:
        Files larger than this are skipped without calling the oracle.
    max_file_tokens:
        Token ceiling for the rendered file content sent for review.
    concurrency:
        Number of review cycles allowed in flight.  ``1`` reproduces the
        strictly sequential order.
    content_loader:
        Callable turning an absolute path into review-ready text.
    """

    def __init__(
        self,
        oracle: OracleClient,
        budget: int = DEFAULT_BUDGET,
        max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
        max_file_tokens: int = 24_000,
        concurrency: int = 1,
        content_loader: Callable[[Path], str] | None = None,
    ) -> None:
        if budget < 0:
            raise ValueError("budget must be non-negative")
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._oracle = oracle
        self._budget = budget
        self._max_size = max_file_size_bytes
        self._concurrency = concurrency
        self._load = content_loader or (
            lambda p: render_file_content(p, max_tokens=max_file_tokens)
        )

    async def run(
        self,
        tree: ProjectTree,
        classification: ProjectClassification,
        key_files: Sequence[KeyFileCandidate],
        *,
        cancel_event: asyncio.Event | None = None,
        on_review: Callable[[RunLedger], None] | None = None,
    ) -> ExplorationResult:
        """Review files starting from *key_files* until the frontier or budget runs out."""
        ledger = RunLedger()
        state = ExplorationState(budget=self._budget)

        for path in order_seeds(key_files):
            if state.enqueue(path) is None:
                ledger.record(LedgerEventKind.DISCOVERED, path, "seed")

        if not state.frontier:
            logger.info("No key files to review; exploration skipped")
            return ExplorationResult(ledger=ledger, state=state)

        run = _Run(
            oracle=self._oracle,
            load=self._load,
            max_size=self._max_size,
            tree=tree,
            classification=classification,
            ledger=ledger,
            state=state,
            cancel_event=cancel_event,
            on_review=on_review,
        )
        await asyncio.gather(*(run.worker() for _ in range(self._concurrency)))

        cancelled = run.cancelled()
        logger.info(
            "Completed review of %d files (%d admitted, %d left in frontier%s)",
            len(ledger),
            len(state.visited),
            len(state.frontier),
            ", cancelled" if cancelled else "",
        )
        return ExplorationResult(ledger=ledger, state=state, cancelled=cancelled)


class _Run:
    """Per-run coordinator shared by the worker tasks."""

    def __init__(
        self,
        oracle: OracleClient,
        load: Callable[[Path], str],
        max_size: int,
        tree: ProjectTree,
        classification: ProjectClassification,
        ledger: RunLedger,
        state: ExplorationState,
        cancel_event: asyncio.Event | None,
        on_review: Callable[[RunLedger], None] | None,
    ) -> None:
        self._oracle = oracle
        self._load = load
        self._max_size = max_size
        self._tree = tree
        self._classification = classification
        self._ledger = ledger
        self._state = state
        self._cancel_event = cancel_event
        self._on_review = on_review
        self._cond = asyncio.Condition()
        self._in_flight = 0
        self._root = Path(tree.root_path).resolve()

    def cancelled(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    async def worker(self) -> None:
        while True:
            async with self._cond:
                path = None
                while path is None:
                    if self.cancelled() or self._state.exhausted:
                        return
                    path = self._state.admit_next()
                    if path is None:
                        if self._in_flight == 0:
                            return
                        await self._cond.wait()
                self._in_flight += 1
                self._ledger.record(LedgerEventKind.ADMITTED, path)

            try:
                await self._cycle(path)
            finally:
                async with self._cond:
                    self._in_flight -= 1
                    self._cond.notify_all()

    async def _cycle(self, path: str) -> None:
        state = self._state
        logger.info(
            "Reviewing file %d/%d: %s", len(state.visited), state.budget, path
        )

        content = await self._materialize(path)
        if content is None:
            return

        outcome = await self._oracle.review_file(path, self._classification, content)
        if self.cancelled():
            logger.info("Run cancelled; discarding review of %s", path)
            return

        self._ledger.append(outcome)
        if self._on_review is not None:
            self._on_review(self._ledger)

        async with self._cond:
            reviewed = sorted(state.visited)
        suggestions = await self._oracle.suggest_related(
            path, outcome, self._tree, reviewed
        )
        if self.cancelled():
            return

        async with self._cond:
            for raw in suggestions:
                candidate = normalize_path(raw)
                reason = state.offer(candidate, self._tree)
                if reason is None:
                    self._ledger.record(LedgerEventKind.DISCOVERED, candidate, f"related to {path}")
                else:
                    logger.debug("Rejected suggestion %s (%s)", raw, reason)
                    self._ledger.record(LedgerEventKind.REJECTED, candidate or raw, reason)
            self._cond.notify_all()

    async def _materialize(self, path: str) -> str | None:
        """Resolve and load *path*; record a skip and return None when it is unusable."""
        full = (self._root / path).resolve()
        reason = await asyncio.to_thread(self._check, full)
        if reason is None:
            try:
                return await asyncio.to_thread(self._load, full)
            except ContentExtractionError as exc:
                logger.warning("Could not read %s: %s", path, exc)
                reason = SkipReason.UNREADABLE

        logger.warning("Skipping %s (%s)", path, reason.value)
        self._ledger.record(LedgerEventKind.SKIPPED, path, reason.value)
        return None

    def _check(self, full: Path) -> SkipReason | None:
        if not full.is_relative_to(self._root) or not full.exists():
            return SkipReason.MISSING
        if full.is_dir():
            return SkipReason.DIRECTORY
        if full.stat().st_size > self._max_size:
            return SkipReason.TOO_LARGE
        return None
