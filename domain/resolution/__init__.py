"""
Resolution pipeline: raw value lookup, format projection and level rendering.
"""

from domain.resolution.projector import FormatProjector, project_entity
from domain.resolution.renderer import (
    LevelPreview,
    LiteralSpan,
    Span,
    TokenSpan,
    generate_level_string,
    render_level,
    render_preview,
    spans_text,
)
from domain.resolution.resolver import (
    DEFAULT_MIN_LOOKUP_LENGTH,
    ValueResolver,
    is_lookup_candidate,
    resolve_raw,
)
from domain.resolution.values import RawValue

__all__ = [
    "RawValue",
    "resolve_raw",
    "is_lookup_candidate",
    "ValueResolver",
    "DEFAULT_MIN_LOOKUP_LENGTH",
    "FormatProjector",
    "project_entity",
    "LiteralSpan",
    "TokenSpan",
    "Span",
    "LevelPreview",
    "render_level",
    "render_preview",
    "spans_text",
    "generate_level_string",
]
