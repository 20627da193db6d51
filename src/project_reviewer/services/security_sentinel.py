"""Secret redaction for anything that is about to be sent to the oracle.

Project files and build manifests routinely carry credentials.  Every file
body and config file passes through :func:`sanitize` first; a match is
replaced with ``[REDACTED]`` unless the matched value is an obvious
placeholder such as ``${DB_PASSWORD}`` or ``<your-api-key>``.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import NamedTuple


class SecretPattern(NamedTuple):
    label: str
    regex: re.Pattern[str]


SECRET_PATTERNS: tuple[SecretPattern, ...] = (
    SecretPattern("AWS_KEY", re.compile(r"AKIA[0-9A-Z]{16}")),
    SecretPattern("GITHUB_TOKEN", re.compile(r"gh[pousr]_[A-Za-z0-9_]{36,}")),
    SecretPattern("OPENAI_KEY", re.compile(r"sk-(?:proj-)?[A-Za-z0-9_\-]{20,}")),
    SecretPattern(
        "GENERIC_KEY",
        re.compile(
            r"(?:api[_\-]?key|apikey|secret[_\-]?key|access[_\-]?token|auth[_\-]?token)"
            r"""\s*[:=]\s*['"]?(?P<value>[A-Za-z0-9_\-/+]{20,})['"]?""",
            re.IGNORECASE,
        ),
    ),
    SecretPattern(
        "PASSWORD",
        re.compile(
            r"""(?:password|passwd|secret|credential)\s*[:=]\s*['"]?(?P<value>[^\s'"]{8,})['"]?""",
            re.IGNORECASE,
        ),
    ),
    SecretPattern(
        "PRIVATE_KEY", re.compile(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----")
    ),
    SecretPattern(
        "JWT", re.compile(r"eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}")
    ),
    SecretPattern(
        "CONN_STRING",
        re.compile(r"(?:postgres|mysql|mongodb|redis)(?:\+\w+)?://[^\s]{10,}", re.IGNORECASE),
    ),
)

# ${VAR}, $VAR, {{ var }}, <your-key>, os.environ[...] and friends
_PLACEHOLDER = re.compile(
    r"^(?:\$\{[^}]*\}?|\$[A-Z_][A-Z0-9_]*|\{\{.*|<[^>]*>?|%\(.*|"
    r"(?:os\.)?(?:environ|getenv|process\.env).*|x{8,}|\*{8,}|changeme|your[_\-].*)$",
    re.IGNORECASE,
)

_REDACTION = "[REDACTED]"


@dataclass(frozen=True, slots=True)
class SanitizedResult:
    clean_text: str
    redaction_count: int
    labels: tuple[str, ...] = ()


def _is_placeholder(match: re.Match[str]) -> bool:
    value = match.groupdict().get("value")
    return value is not None and _PLACEHOLDER.match(value) is not None


def sanitize(text: str) -> SanitizedResult:
    """Replace every secret-looking match in *text* with ``[REDACTED]``.

    ``labels`` lists the pattern names that fired, in pattern order.
    """
    hits: Counter[str] = Counter()

    def _redact(label: str):
        def _sub(match: re.Match[str]) -> str:
            if _is_placeholder(match):
                return match.group(0)
            hits[label] += 1
            return _REDACTION

        return _sub

    for label, regex in SECRET_PATTERNS:
        text = regex.sub(_redact(label), text)

    labels = tuple(p.label for p in SECRET_PATTERNS if hits[p.label])
    return SanitizedResult(clean_text=text, redaction_count=sum(hits.values()), labels=labels)


def sanitize_mapping(texts: dict[str, str]) -> tuple[dict[str, str], int]:
    """Sanitize ``{path: text}``; returns the cleaned mapping and total redactions."""
    cleaned = {key: sanitize(text) for key, text in texts.items()}
    return (
        {key: res.clean_text for key, res in cleaned.items()},
        sum(res.redaction_count for res in cleaned.values()),
    )
