"""Per-group previews over the consumer's visible levels."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from domain.resolution.renderer import LevelPreview, render_preview
from domain.resolution.resolver import ValueResolver
from domain.schemas import ConsumerType, HighlightState, TaxonomyDefinition, TaxonomyGroup
from domain.taxonomy.parser import LEVEL_SEPARATOR, join_levels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupPreview:
    """Rendered levels of one selected taxonomy."""

    group: TaxonomyGroup
    taxonomy_id: str
    display_name: str
    levels: list[LevelPreview] = field(default_factory=list)

    @property
    def text(self) -> str:
        return LEVEL_SEPARATOR.join(lvl.text for lvl in self.levels)

    @property
    def structure(self) -> str:
        return join_levels(lvl.template for lvl in self.levels)

    @property
    def token_count(self) -> int:
        return sum(lvl.token_count for lvl in self.levels)

    @property
    def resolved_count(self) -> int:
        return sum(lvl.resolved_count for lvl in self.levels)

    @property
    def is_complete(self) -> bool:
        return all(lvl.is_complete for lvl in self.levels)

    def contains_variable(self, name: str) -> bool:
        return f"[{name}:" in self.structure


class PreviewAggregator:
    """
    Builds group previews for one consumer from the selected definitions.

    Every call renders afresh from the resolver, so a preview reflects the
    overlay and cache contents at the time of the call.
    """

    def __init__(
        self,
        definitions: Mapping[TaxonomyGroup, TaxonomyDefinition],
        consumer: ConsumerType,
        resolver: ValueResolver,
    ):
        self.definitions = definitions
        self.consumer = consumer
        self.resolver = resolver

    def group_preview(self, group: TaxonomyGroup) -> GroupPreview | None:
        definition = self.definitions.get(group)
        if definition is None:
            return None
        levels = [
            render_preview(level, self.resolver.resolve, self.resolver.rules.classify)
            for level in definition.levels_for(self.consumer)
        ]
        return GroupPreview(
            group=group,
            taxonomy_id=definition.id,
            display_name=definition.display_name,
            levels=levels,
        )

    def previews(self) -> dict[TaxonomyGroup, GroupPreview]:
        result = {}
        for group in TaxonomyGroup:
            preview = self.group_preview(group)
            if preview is not None:
                result[group] = preview
        return result

    def full_preview_string(self, group: TaxonomyGroup) -> str:
        preview = self.group_preview(group)
        return preview.text if preview is not None else ""

    def contains_variable(self, group: TaxonomyGroup, name: str) -> bool:
        """Whether the group's visible templates reference ``name`` in any format."""
        definition = self.definitions.get(group)
        if definition is None:
            return False
        structure = join_levels(lvl.template for lvl in definition.levels_for(self.consumer))
        return f"[{name}:" in structure

    def highlighted_groups(self, highlight: HighlightState) -> list[TaxonomyGroup]:
        if not highlight.active_variable:
            return []
        return [g for g in TaxonomyGroup if self.contains_variable(g, highlight.active_variable)]

    def completion(self) -> tuple[int, int]:
        """(resolved, total) token counts across all groups."""
        previews = self.previews().values()
        resolved = sum(p.resolved_count for p in previews)
        total = sum(p.token_count for p in previews)
        logger.debug("Preview completion for %s: %d/%d", self.consumer.value, resolved, total)
        return resolved, total
