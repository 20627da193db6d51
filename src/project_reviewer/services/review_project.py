"""Review-project use case — the main orchestration pipeline.

This is the single entry point for the business logic.  It depends only on
the ports (:class:`StructureProvider`, :class:`SizeCounter`,
:class:`LlmGateway`, :class:`RunRecorder`) and the pure service modules.
The interface layer injects concrete adapters at runtime.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from project_reviewer.domain.entities import FinalReport, ProjectTree, SizeReport
from project_reviewer.domain.exceptions import (
    ProjectReviewerError,
    StructureUnavailableError,
)
from project_reviewer.domain.ports import run_recorder as entries
from project_reviewer.domain.ports.llm_gateway import LlmGateway
from project_reviewer.domain.ports.run_recorder import RunRecorder
from project_reviewer.domain.ports.size_counter import SizeCounter
from project_reviewer.domain.ports.structure_provider import StructureProvider
from project_reviewer.services.exploration import ExplorationEngine
from project_reviewer.services.file_filter import is_config_file
from project_reviewer.services.oracle_client import OracleClient
from project_reviewer.services.report_assembler import ReportAssembler
from project_reviewer.services.run_ledger import RunLedger
from project_reviewer.services.tree_builder import build_tree

logger = logging.getLogger(__name__)

_MAX_CONFIG_CHARS = 20_000


class ReviewProjectUseCase:
    """Orchestrates the full project → review report pipeline.

    Parameters
    ----------
    structure_provider:
        Lists the project's files.  Its failure is the only fatal error.
    size_counter:
        Counts lines of code per language.
    llm_gateway:
        Adapter that can send prompts to an LLM.
    max_files_to_review:
        Review budget for the exploration phase.
    max_file_size_bytes:
        Files above this size are skipped.
    max_file_tokens:
        Token ceiling for a single file's content.
    concurrency:
        Review cycles allowed in flight.
    run_timeout_seconds:
        When set, exploration stops admitting files after this many seconds
        and the report is built from what was reviewed.
    """

    def __init__(
        self,
        structure_provider: StructureProvider,
        size_counter: SizeCounter,
        llm_gateway: LlmGateway,
        max_files_to_review: int = 50,
        max_file_size_bytes: int = 1_000_000,
        max_file_tokens: int = 24_000,
        concurrency: int = 1,
        run_timeout_seconds: float | None = None,
    ) -> None:
        self._structure = structure_provider
        self._sizer = size_counter
        self._oracle = OracleClient(llm_gateway)
        self._assembler = ReportAssembler(self._oracle)
        self._budget = max_files_to_review
        self._max_size = max_file_size_bytes
        self._max_tokens = max_file_tokens
        self._concurrency = concurrency
        self._timeout = run_timeout_seconds

    # ── Public entry point ──────────────────────────────────────────────

    async def execute(
        self,
        project_path: str,
        *,
        max_files: int | None = None,
        recorder: RunRecorder | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> FinalReport:
        """Run the full pipeline and return the assembled report."""
        root = os.path.abspath(project_path)
        logger.info("Starting review of project at: %s", root)

        # 1. Structure (fatal on failure, before any oracle call)
        tree = await self._acquire_tree(root)
        _save(recorder, entries.PROJECT_STRUCTURE, tree.root)

        # 2. Classification
        config_files = await asyncio.to_thread(_read_config_files, tree)
        classification = await self._oracle.classify_project(tree, config_files)
        _save(recorder, entries.PROJECT_INFO, classification)
        logger.info("Project identified as: %s", classification.type)

        # 3. Key files
        key_files = await self._oracle.rank_key_files(tree, classification)
        _save(recorder, entries.KEY_FILES, key_files)
        logger.info("Identified %d key files for review", len(key_files))

        # 4. Exploration
        engine = ExplorationEngine(
            self._oracle,
            budget=self._budget if max_files is None else max_files,
            max_file_size_bytes=self._max_size,
            max_file_tokens=self._max_tokens,
            concurrency=self._concurrency,
        )
        cancel_event = cancel_event or asyncio.Event()
        timer = None
        if self._timeout is not None:
            timer = asyncio.get_running_loop().call_later(self._timeout, cancel_event.set)

        def _snapshot(ledger: RunLedger) -> None:
            _save(recorder, entries.REVIEW_LEDGER, ledger.snapshot())

        try:
            result = await engine.run(
                tree,
                classification,
                key_files,
                cancel_event=cancel_event,
                on_review=_snapshot if recorder is not None else None,
            )
        finally:
            if timer is not None:
                timer.cancel()
        if result.cancelled:
            logger.warning("Exploration stopped early; reporting on %d files", len(result.ledger))
        _snapshot(result.ledger)

        # 5. Size
        size = await self._count_size(root)
        _save(recorder, entries.PROJECT_SIZE, size)

        # 6. Report
        report = await self._assembler.assemble(classification, result.ledger, size, tree)
        _save(recorder, entries.FINAL_REPORT, report)
        logger.info("Review completed for %s", root)
        return report

    # ── Steps ───────────────────────────────────────────────────────────

    async def _acquire_tree(self, root: str) -> ProjectTree:
        try:
            files = await asyncio.to_thread(self._structure.list_files, root)
        except ProjectReviewerError:
            raise
        except Exception as exc:
            raise StructureUnavailableError(f"Structure provider failed: {exc}") from exc

        if not isinstance(files, list):
            raise StructureUnavailableError(
                f"Structure provider returned {type(files).__name__}, expected a list"
            )
        return build_tree(root, files)

    async def _count_size(self, root: str) -> SizeReport:
        try:
            return await asyncio.to_thread(self._sizer.count, root)
        except Exception:
            logger.warning("Size counter failed; reporting zero size", exc_info=True)
            return SizeReport()


# ── Helpers ─────────────────────────────────────────────────────────────────


def _read_config_files(tree: ProjectTree) -> dict[str, str]:
    """Return ``{path: content}`` for every config manifest in *tree*."""
    root = Path(tree.root_path)
    contents: dict[str, str] = {}
    for node in tree.iter_files():
        if not is_config_file(node.path):
            continue
        try:
            text = (root / node.path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error reading config file %s: %s", node.path, exc)
            continue
        contents[node.path] = text[:_MAX_CONFIG_CHARS]
    return contents


def _save(recorder: RunRecorder | None, name: str, data: object) -> None:
    if recorder is None:
        return
    try:
        recorder.save(name, data)
    except OSError:
        logger.warning("Could not cache %s", name, exc_info=True)

