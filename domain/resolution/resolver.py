"""Value resolution against the layered resolution context."""

import logging
from typing import Any

from domain.resolution.projector import FormatProjector
from domain.resolution.values import RawValue
from domain.schemas import FieldSource, ResolutionContext, TaxonomyFormat
from domain.taxonomy.classifier import DEFAULT_SOURCE_RULES, SourceRules
from domain.taxonomy.parser import placeholder

logger = logging.getLogger(__name__)

DEFAULT_MIN_LOOKUP_LENGTH = 5


def _as_text(value: Any) -> str | None:
    """Stored field value as text; empty values do not resolve."""
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    if not text.strip():
        return None
    return text


def resolve_raw(
    name: str,
    context: ResolutionContext,
    *,
    rules: SourceRules = DEFAULT_SOURCE_RULES,
) -> RawValue | None:
    """
    Find a variable's raw value.

    Precedence: manual overlay, then the record matching the variable's source
    (campaign, tactique, or form data followed by the placement record for
    placement and creatif variables). Manual variables only resolve from the
    overlay.

    Returns:
        RawValue, or None when nothing non-empty was found
    """
    source = rules.classify(name)

    manual = context.manual_overlay.get(name)
    if manual is not None:
        text = _as_text(manual.raw_value) or _as_text(manual.reference_id) or _as_text(manual.open_text)
        if text is not None:
            return RawValue(
                text=text,
                source=source,
                reference_id=_as_text(manual.reference_id),
                open_text=_as_text(manual.open_text),
                from_overlay=True,
            )

    text: str | None = None
    if source is FieldSource.CAMPAIGN:
        text = _as_text(context.campaign_record.get(name))
    elif source is FieldSource.TACTIQUE:
        text = _as_text(context.tactique_record.get(name))
    elif source in (FieldSource.PLACEMENT, FieldSource.CREATIF):
        text = _as_text(context.form_data.get(name))
        if text is None and context.placement_record:
            text = _as_text(context.placement_record.get(name))

    if text is None:
        return None
    return RawValue(text=text, source=source)


def is_lookup_candidate(
    raw: RawValue,
    fmt: TaxonomyFormat,
    min_lookup_length: int = DEFAULT_MIN_LOOKUP_LENGTH,
) -> bool:
    """
    Decide whether a raw value should go through the reference catalog.

    Examples:
        >>> is_lookup_candidate(RawValue("abc123XYZ", FieldSource.CAMPAIGN), TaxonomyFormat.CODE)
        True
        >>> is_lookup_candidate(RawValue("Spring sale", FieldSource.CAMPAIGN), TaxonomyFormat.CODE)
        False
        >>> is_lookup_candidate(RawValue("abc123XYZ", FieldSource.CAMPAIGN), TaxonomyFormat.OPEN)
        False
        >>> is_lookup_candidate(RawValue("pubGoogle01", FieldSource.PLACEMENT), TaxonomyFormat.CODE)
        True
    """
    if not fmt.requires_catalog:
        return False
    if raw.reference_id:
        return True
    # Typed manual text is not an id; catalog picks carry reference_id.
    if raw.from_overlay:
        return False
    return len(raw.text) > min_lookup_length and not any(c.isspace() for c in raw.text)


class ValueResolver:
    """Resolves ``(name, format)`` pairs into display text for one context."""

    def __init__(
        self,
        context: ResolutionContext,
        projector: FormatProjector,
        rules: SourceRules = DEFAULT_SOURCE_RULES,
        min_lookup_length: int = DEFAULT_MIN_LOOKUP_LENGTH,
    ):
        self.context = context
        self.projector = projector
        self.rules = rules
        self.min_lookup_length = min_lookup_length

    def raw(self, name: str) -> RawValue | None:
        return resolve_raw(name, self.context, rules=self.rules)

    def resolve(self, name: str, fmt: TaxonomyFormat) -> str | None:
        """
        Resolve a variable in a format.

        Returns:
            Projected text, or None when the variable is unresolved
        """
        raw = self.raw(name)
        if raw is None:
            return None

        if fmt is TaxonomyFormat.OPEN or is_lookup_candidate(raw, fmt, self.min_lookup_length):
            text = self.projector.project(raw, fmt)
        else:
            text = raw.text

        if not text:
            logger.debug("Variable %s resolved to empty text as %s", name, fmt.value)
            return None
        return text

    def resolved_text(self, name: str, fmt: TaxonomyFormat) -> str:
        """Resolved text, or the literal placeholder when unresolved."""
        text = self.resolve(name, fmt)
        return text if text is not None else placeholder(name, fmt)
