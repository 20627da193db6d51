"""Best-effort recovery of JSON objects from free-text LLM output.

Pure functions only, so every recovery rule can be tested without a model.
"""

from __future__ import annotations

import json
import re
from typing import Any

_FENCE_OPEN_RE = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\n?")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json … ```) wherever they appear."""
    return _FENCE_OPEN_RE.sub("", text).replace("```", "").strip()


def remove_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing brace or bracket.

    Text inside JSON strings, and anything before the first ``{``, is copied
    unchanged.
    """
    start = text.find("{")
    if start == -1:
        return text
    out: list[str] = list(text[:start])
    pending: int | None = None  # index in *out* of a comma that may be trailing
    in_string = False
    escaped = False
    for ch in text[start:]:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch in "}]" and pending is not None:
            del out[pending]
            pending = None
        elif ch == ",":
            pending = len(out)
        elif not ch.isspace():
            pending = None
            if ch == '"':
                in_string = True
        out.append(ch)
    return "".join(out)


def find_first_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` literal in *text*.

    Braces inside JSON strings (including escaped quotes) are ignored.
    Returns *None* when no balanced object exists.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        start = text.find("{", start + 1)
    return None


def parse_partial(raw: str | None) -> dict[str, Any] | None:
    """Try hard to extract a JSON object from *raw*; return *None* on failure."""
    if not raw or not raw.strip():
        return None

    text = remove_trailing_commas(strip_code_fences(raw))

    candidates = [text]
    obj = find_first_object(text)
    if obj is not None and obj != text:
        candidates.append(obj)

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None
