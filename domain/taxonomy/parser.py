"""Token grammar for taxonomy templates.

A template is literal text interleaved with ``[name:format]`` tokens. ``name``
holds no colon or bracket and ``format`` must be one of ``TaxonomyFormat``.
Anything that does not match exactly is literal text.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from domain.schemas import TaxonomyFormat

LEVEL_SEPARATOR = "|"

_FORMAT_ALTERNATION = "|".join(re.escape(f.value) for f in TaxonomyFormat)
TOKEN_PATTERN = re.compile(r"\[([^:\[\]]+):(" + _FORMAT_ALTERNATION + r")\]")

# Anything bracketed; used only to report near-miss tokens.
_BRACKETED = re.compile(r"\[([^\[\]]*)\]")


@dataclass(frozen=True)
class TokenOccurrence:
    """One ``[name:format]`` match inside a template."""

    name: str
    format: TaxonomyFormat
    start: int
    end: int

    @property
    def raw(self) -> str:
        return placeholder(self.name, self.format)


def placeholder(name: str, fmt: TaxonomyFormat | str) -> str:
    """Literal bracket form of a token, as stored in templates."""
    value = fmt.value if isinstance(fmt, TaxonomyFormat) else str(fmt)
    return f"[{name}:{value}]"


def parse_tokens(structure: str) -> list[TokenOccurrence]:
    """
    Extract token occurrences in order of appearance.

    ``finditer`` builds a new scanner on every call, so nothing carries over
    between invocations.

    Args:
        structure: A level template or several levels joined with ``LEVEL_SEPARATOR``

    Returns:
        Ordered list of occurrences (duplicates kept)
    """
    if not structure:
        return []
    return [
        TokenOccurrence(
            name=m.group(1),
            format=TaxonomyFormat(m.group(2)),
            start=m.start(),
            end=m.end(),
        )
        for m in TOKEN_PATTERN.finditer(structure)
    ]


def split_template(template: str) -> list[str | TokenOccurrence]:
    """Split a template into literal strings and token occurrences, preserving order."""
    segments: list[str | TokenOccurrence] = []
    cursor = 0
    for token in parse_tokens(template):
        if token.start > cursor:
            segments.append(template[cursor : token.start])
        segments.append(token)
        cursor = token.end
    if cursor < len(template):
        segments.append(template[cursor:])
    return segments


def join_levels(templates: Iterable[str], separator: str = LEVEL_SEPARATOR) -> str:
    """Join non-empty level templates into one structure string."""
    return separator.join(t for t in templates if t)


def find_malformed_tokens(template: str) -> list[str]:
    """
    Report bracketed segments that look like tokens but do not follow the grammar.

    Such segments (``[PL_Name]``, ``[PL_Name:bogus]``, ``[:code]``) are rendered as
    literal text; this helper only surfaces them for authoring feedback.
    """
    if not template:
        return []
    valid_spans = {(t.start, t.end) for t in parse_tokens(template)}
    malformed: list[str] = []
    for m in _BRACKETED.finditer(template):
        if (m.start(), m.end()) in valid_spans:
            continue
        inner = m.group(1)
        # Bracketed prose without a colon is common in labels; only flag identifier-like content.
        if ":" in inner or re.fullmatch(r"[A-Za-z][A-Za-z0-9_]*", inner):
            malformed.append(m.group(0))
    return malformed
