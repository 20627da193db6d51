"""Merges the oracle narrative with the literal run data into the final report."""

from __future__ import annotations

import logging

from project_reviewer.domain.entities import (
    FinalReport,
    Introduction,
    Miscellaneous,
    ProjectClassification,
    ProjectTree,
    Recommendation,
    ReportSummary,
    Severity,
    SizeReport,
)
from project_reviewer.services.oracle_client import OracleClient
from project_reviewer.services.run_ledger import RunLedger

logger = logging.getLogger(__name__)

UNKNOWN_FUNCTIONALITIES = ("Unable to identify main functionalities due to an error",)

PLACEHOLDER_RECOMMENDATION = Recommendation(
    description="Review code for security vulnerabilities",
    priority=Severity.HIGH,
    effort=Severity.MEDIUM,
    category="Security",
)


def fallback_summary(classification: ProjectClassification) -> ReportSummary:
    """Narrative used when the oracle cannot summarise the run."""
    return ReportSummary(
        purpose=classification.description,
        functionalities=UNKNOWN_FUNCTIONALITIES,
        recommendations=(PLACEHOLDER_RECOMMENDATION,),
        degraded=True,
    )


class ReportAssembler:
    """Builds the :class:`FinalReport`; never fails on oracle trouble."""

    def __init__(self, oracle: OracleClient) -> None:
        self._oracle = oracle

    async def assemble(
        self,
        classification: ProjectClassification,
        ledger: RunLedger,
        size: SizeReport,
        tree: ProjectTree,
    ) -> FinalReport:
        fallback = fallback_summary(classification)
        outcomes = ledger.outcomes

        if outcomes:
            summary = await self._oracle.summarize(classification, outcomes, fallback)
        else:
            logger.warning("No files were reviewed; using the fallback narrative")
            summary = fallback

        if summary.degraded:
            logger.warning("Report narrative is degraded")

        return FinalReport(
            introduction=Introduction(
                project_type=classification.type,
                purpose=summary.purpose,
                functionalities=summary.functionalities,
                technologies=classification.technologies,
                structure_overview=tree.render(),
            ),
            issues=summary.issues,
            strengths=summary.strengths,
            miscellaneous=Miscellaneous(
                size=size,
                dependencies=classification.dependencies,
            ),
            recommendations=summary.recommendations,
            file_reviews=outcomes,
            skipped=ledger.skipped,
        )
