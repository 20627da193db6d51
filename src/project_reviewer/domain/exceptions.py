"""Errors raised by the review pipeline.

Only structure acquisition is fatal to a run.  ``LlmError`` is raised by
gateways and absorbed by the oracle client, which substitutes a typed
fallback value; ``ContentExtractionError`` is absorbed by the exploration
engine, which records the file as skipped.
"""

from __future__ import annotations


class ProjectReviewerError(Exception):
    """Root of every error this package raises on purpose."""


# ── Fatal: no project to review ─────────────────────────────────────────────


class InvalidProjectPathError(ProjectReviewerError):
    """The project path is missing or is not a directory."""


class StructureUnavailableError(ProjectReviewerError):
    """Listing the project's files failed or returned something malformed."""


class EmptyProjectError(StructureUnavailableError):
    """Listing succeeded but found no reviewable files."""


# ── Absorbed inside a run ───────────────────────────────────────────────────


class LlmError(ProjectReviewerError):
    """The language model could not be reached or returned nothing usable."""


class ContentExtractionError(ProjectReviewerError):
    """A file could not be read or decoded for review."""
