"""File content materialisation for review prompts.

Reads a file, numbers its lines, redacts secrets and truncates the result to
a token budget measured with ``tiktoken``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

import tiktoken

from project_reviewer.domain.exceptions import ContentExtractionError
from project_reviewer.services.security_sentinel import sanitize

logger = logging.getLogger(__name__)

_ENCODING_NAME = "cl100k_base"  # GPT-4o family


@lru_cache(maxsize=1)
def _get_encoder() -> tiktoken.Encoding:
    return tiktoken.get_encoding(_ENCODING_NAME)


def truncate_to_budget(text: str, max_tokens: int) -> str:
    """Truncate *text* to fit within *max_tokens*, cutting at line boundaries."""
    # A token covers at least one character.
    if len(text) <= max_tokens:
        return text

    tokens = _get_encoder().encode(text)
    if len(tokens) <= max_tokens:
        return text

    kept = _get_encoder().decode(tokens[:max_tokens])
    cut = kept.rfind("\n")
    if cut > len(kept) // 2:
        kept = kept[:cut]
    omitted = max(text.count("\n", len(kept)), 1)
    return f"{kept}\n[… {omitted} more line(s) truncated to fit the token budget]"


def number_lines(text: str) -> str:
    """Prefix every line with its 1-based line number."""
    lines = text.splitlines()
    width = len(str(len(lines))) if lines else 1
    return "\n".join(f"{i:>{width}} {line}" for i, line in enumerate(lines, start=1))


def render_file_content(path: Path, max_tokens: int = 24_000) -> str:
    """Return the review-ready rendering of the file at *path*.

    Raises
    ------
    ContentExtractionError
        If the file cannot be read or decoded as UTF-8.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentExtractionError(f"Cannot read {path}: {exc}") from exc

    result = sanitize(raw)
    if result.redaction_count:
        logger.warning(
            "Redacted %d potential secret(s) from %s", result.redaction_count, path.name
        )

    return truncate_to_budget(number_lines(result.clean_text), max_tokens)
