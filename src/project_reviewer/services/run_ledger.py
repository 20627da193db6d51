"""The append-only record of an exploration run."""

from __future__ import annotations

import dataclasses
import itertools
from typing import Any

from project_reviewer.domain.entities import LedgerEvent, LedgerEventKind, ReviewOutcome


class RunLedger:
    """Ordered review outcomes plus every admission, skip and rejection decision.

    Outcomes are kept in the order they were appended, which is the order
    files finished review.  Each outcome and event carries a sequence number
    drawn from a single counter, so interleaved entries can be re-ordered
    deterministically.  Nothing is ever mutated or removed.
    """

    def __init__(self) -> None:
        self._outcomes: list[ReviewOutcome] = []
        self._events: list[LedgerEvent] = []
        self._reviewed: set[str] = set()
        self._sequence = itertools.count(1)

    # ── Writes ──────────────────────────────────────────────────────────

    def record(self, kind: LedgerEventKind, path: str, reason: str = "") -> LedgerEvent:
        event = LedgerEvent(sequence=next(self._sequence), kind=kind, path=path, reason=reason)
        self._events.append(event)
        return event

    def append(self, outcome: ReviewOutcome) -> ReviewOutcome:
        """Append *outcome*, stamping it with the next sequence number.

        Raises
        ------
        ValueError
            If an outcome for the same path is already present.
        """
        if outcome.path in self._reviewed:
            raise ValueError(f"Ledger already holds a review for {outcome.path}")
        stamped = dataclasses.replace(outcome, sequence=next(self._sequence))
        self._outcomes.append(stamped)
        self._reviewed.add(stamped.path)
        self._events.append(
            LedgerEvent(
                sequence=stamped.sequence,
                kind=LedgerEventKind.REVIEWED,
                path=stamped.path,
                reason="degraded" if stamped.degraded else "",
            )
        )
        return stamped

    # ── Reads ───────────────────────────────────────────────────────────

    @property
    def outcomes(self) -> tuple[ReviewOutcome, ...]:
        return tuple(self._outcomes)

    @property
    def events(self) -> tuple[LedgerEvent, ...]:
        return tuple(self._events)

    @property
    def reviewed_paths(self) -> list[str]:
        return [o.path for o in self._outcomes]

    @property
    def skipped(self) -> dict[str, str]:
        """``{path: reason}`` for every admitted path that produced no review."""
        return {
            e.path: e.reason for e in self._events if e.kind is LedgerEventKind.SKIPPED
        }

    def __len__(self) -> int:
        return len(self._outcomes)

    def snapshot(self) -> dict[str, Any]:
        """JSON-serialisable view used for incremental cache snapshots."""
        return {
            "outcomes": [dataclasses.asdict(o) for o in self._outcomes],
            "events": [dataclasses.asdict(e) for e in self._events],
        }
