"""Tests for the append-only run ledger."""

from __future__ import annotations

import pytest

from project_reviewer.domain.entities import LedgerEventKind, ReviewOutcome
from project_reviewer.services.run_ledger import RunLedger


def test_append_stamps_increasing_sequence_numbers() -> None:
    ledger = RunLedger()
    ledger.record(LedgerEventKind.ADMITTED, "a.py")
    first = ledger.append(ReviewOutcome(path="a.py", quality_note="ok"))
    ledger.record(LedgerEventKind.SKIPPED, "gone.py", "missing")
    second = ledger.append(ReviewOutcome(path="b.py", quality_note="ok", degraded=True))

    assert first.sequence < second.sequence
    assert ledger.reviewed_paths == ["a.py", "b.py"]
    assert ledger.skipped == {"gone.py": "missing"}
    kinds = [e.kind for e in ledger.events]
    assert kinds == [
        LedgerEventKind.ADMITTED,
        LedgerEventKind.REVIEWED,
        LedgerEventKind.SKIPPED,
        LedgerEventKind.REVIEWED,
    ]
    assert ledger.events[-1].reason == "degraded"


def test_append_rejects_second_review_of_same_path() -> None:
    ledger = RunLedger()
    ledger.append(ReviewOutcome(path="a.py", quality_note="ok"))

    with pytest.raises(ValueError):
        ledger.append(ReviewOutcome(path="a.py", quality_note="again"))
    assert len(ledger) == 1


def test_outcomes_are_read_only_views() -> None:
    ledger = RunLedger()
    ledger.append(ReviewOutcome(path="a.py", quality_note="ok"))

    outcomes = ledger.outcomes
    assert isinstance(outcomes, tuple)
    assert ledger.snapshot()["outcomes"][0]["path"] == "a.py"
