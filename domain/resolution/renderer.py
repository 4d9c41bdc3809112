"""Level rendering: live previews with partial-completion feedback, and final tag strings."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from domain.schemas import FieldSource, Level, TaxonomyFormat
from domain.taxonomy.parser import TOKEN_PATTERN, TokenOccurrence, placeholder, split_template

ValueOf = Callable[[str, TaxonomyFormat], str | None]
Classify = Callable[[str], FieldSource]

_GROUP_PATTERN = re.compile(r"<([^<>]*)>")
_GROUP_DELIMITER = re.compile(r"\](.*?)\s*\[")


@dataclass(frozen=True)
class LiteralSpan:
    text: str


@dataclass(frozen=True)
class TokenSpan:
    """A rendered token. ``resolved`` is None when the variable has no value."""

    name: str
    format: TaxonomyFormat
    source: FieldSource
    resolved: str | None = None

    @property
    def missing(self) -> bool:
        return self.resolved is None

    @property
    def text(self) -> str:
        return self.resolved if self.resolved is not None else placeholder(self.name, self.format)


Span = LiteralSpan | TokenSpan


def render_level(template: str, value_of: ValueOf, classify: Classify) -> list[Span]:
    """
    Render one level template into spans.

    Unresolved tokens keep their literal ``[name:format]`` text and are
    flagged ``missing``. Rendering an unchanged template against unchanged
    values always yields the same spans.

    Args:
        template: Level template
        value_of: Resolver callback, returns None for unresolved variables
        classify: Source classifier callback

    Returns:
        Ordered spans covering the whole template
    """
    spans: list[Span] = []
    for segment in split_template(template):
        if isinstance(segment, TokenOccurrence):
            spans.append(
                TokenSpan(
                    name=segment.name,
                    format=segment.format,
                    source=classify(segment.name),
                    resolved=value_of(segment.name, segment.format),
                )
            )
        else:
            spans.append(LiteralSpan(segment))
    return spans


def spans_text(spans: list[Span]) -> str:
    return "".join(s.text for s in spans)


@dataclass(frozen=True)
class LevelPreview:
    """Rendered preview of one titled level."""

    number: int
    title: str
    template: str
    spans: list[Span] = field(default_factory=list)

    @property
    def text(self) -> str:
        return spans_text(self.spans)

    @property
    def tokens(self) -> list[TokenSpan]:
        return [s for s in self.spans if isinstance(s, TokenSpan)]

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    @property
    def resolved_count(self) -> int:
        return sum(1 for t in self.tokens if not t.missing)

    @property
    def is_complete(self) -> bool:
        return self.resolved_count == self.token_count

    def contains_variable(self, name: str) -> bool:
        return any(t.name == name for t in self.tokens)


def render_preview(level: Level, value_of: ValueOf, classify: Classify) -> LevelPreview:
    return LevelPreview(
        number=level.number,
        title=level.display_title,
        template=level.template,
        spans=render_level(level.template, value_of, classify),
    )


def _substitute_tokens(text: str, value_of: ValueOf) -> str:
    def repl(m: re.Match) -> str:
        value = value_of(m.group(1), TaxonomyFormat(m.group(2)))
        return value or ""

    return TOKEN_PATTERN.sub(repl, text)


def _collapse_group(content: str, value_of: ValueOf) -> str:
    tokens = list(TOKEN_PATTERN.finditer(content))
    if not tokens:
        return content

    values = []
    for m in tokens:
        value = value_of(m.group(1), TaxonomyFormat(m.group(2)))
        if value and value.strip():
            values.append(value)
    if not values:
        return ""

    delimiter = _GROUP_DELIMITER.search(content)
    return (delimiter.group(1) if delimiter else "").join(values)


def generate_level_string(template: str, value_of: ValueOf) -> str:
    """
    Build the final tag string saved for a level.

    Resolved tokens are substituted and unresolved ones dropped. A ``<...>``
    group joins its resolved values with the text found between its first
    ``]`` and the next ``[``, and disappears when none of them resolved; a
    group without tokens keeps its inner text.

    Examples:
        >>> values = {"A": "x", "B": "y"}
        >>> generate_level_string("<[A:open]-[B:open]>_end", lambda n, f: values.get(n))
        'x-y_end'
        >>> generate_level_string("<[A:open]-[C:open]>", lambda n, f: values.get(n))
        'x'
    """
    if not template:
        return ""

    parts: list[str] = []
    cursor = 0
    for m in _GROUP_PATTERN.finditer(template):
        parts.append(_substitute_tokens(template[cursor : m.start()], value_of))
        parts.append(_collapse_group(m.group(1), value_of))
        cursor = m.end()
    parts.append(_substitute_tokens(template[cursor:], value_of))
    return "".join(parts)
