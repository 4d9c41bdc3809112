"""Taxonomy engine: one editing session over a placement or creatif."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from application.editing import CatalogOption, EditorState, FieldChangeCoordinator
from application.generation import generate_taxonomy_fields
from application.preview import GroupPreview, PreviewAggregator
from domain.catalog.cache import ReferenceCache
from domain.resolution.projector import FormatProjector
from domain.resolution.resolver import DEFAULT_MIN_LOOKUP_LENGTH, ValueResolver
from domain.schemas import (
    ConsumerType,
    HighlightState,
    ManualValue,
    ResolutionContext,
    TaxonomyDefinition,
    TaxonomyFormat,
    TaxonomyGroup,
    VariableToken,
)
from domain.taxonomy.classifier import DEFAULT_SOURCE_RULES, SourceRules
from domain.taxonomy.loader import parse_taxonomy_definition
from domain.taxonomy.variables import collect_variables, manual_variables
from infrastructure.config.models import EngineConfig, LookupConfig
from infrastructure.store.base import StoreError, TaxonomyStore

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


@dataclass(frozen=True)
class FieldState:
    """Everything a form needs to draw one editable variable."""

    variable: VariableToken
    preview: str
    editor: EditorState
    manual: ManualValue | None = None
    options: list[CatalogOption] = field(default_factory=list)
    highlighted: bool = False

    @property
    def name(self) -> str:
        return self.variable.name

    @property
    def has_catalog(self) -> bool:
        return bool(self.options)


class TaxonomyEngine:
    """
    Wires store, reference cache, overlay, resolver and previews for one session.

    Previews are memoized on the revisions of the context, the overlay and the
    cache, so a completed fetch always invalidates them. Listeners registered
    with ``subscribe`` are called after every change that can alter a preview.
    """

    def __init__(
        self,
        store: TaxonomyStore,
        client_id: str,
        consumer: ConsumerType = ConsumerType.PLACEMENT,
        *,
        context: ResolutionContext | None = None,
        overlay: Mapping[str, ManualValue] | None = None,
        rules: SourceRules = DEFAULT_SOURCE_RULES,
        lookup: LookupConfig | None = None,
        cache: ReferenceCache | None = None,
    ) -> None:
        self.store = store
        self.client_id = client_id
        self.consumer = consumer
        self.rules = rules
        self.lookup = lookup or LookupConfig(min_lookup_length=DEFAULT_MIN_LOOKUP_LENGTH)

        self.cache = cache or ReferenceCache(fetch_entity=store.get_reference)
        self.projector = FormatProjector(self.cache)
        self.coordinator = FieldChangeCoordinator(overlay)

        self.selection: dict[TaxonomyGroup, str] = {}
        self.unknown_groups: list[str] = []
        self.definitions: dict[TaxonomyGroup, TaxonomyDefinition] = {}
        self.variables: list[VariableToken] = []
        self.options: dict[str, list[CatalogOption]] = {}
        self.highlight = HighlightState()
        self.load_error: str | None = None

        self._context = context or ResolutionContext()
        self._revision = 0
        self._memo: tuple[tuple[int, int, int], dict[TaxonomyGroup, GroupPreview]] | None = None
        self._listeners: list[Listener] = []

        self._remove_cache_listener = self.cache.add_listener(self._on_cache_change)
        self.coordinator.subscribe(self._on_overlay_change)

    @classmethod
    def from_cfg(
        cls,
        cfg: EngineConfig,
        store: TaxonomyStore,
        *,
        context: ResolutionContext | None = None,
        overlay: Mapping[str, ManualValue] | None = None,
        cache: ReferenceCache | None = None,
    ) -> "TaxonomyEngine":
        return cls(
            store,
            cfg.client_id,
            cfg.consumer,
            context=context,
            overlay=overlay,
            rules=cfg.source_rules,
            lookup=cfg.lookup,
            cache=cache,
        )

    # ---- state ----

    @property
    def context(self) -> ResolutionContext:
        """Current context with the session overlay applied."""
        return self._context.with_overlay(dict(self.coordinator.overlay))

    def resolver(self) -> ValueResolver:
        return ValueResolver(
            self.context,
            self.projector,
            rules=self.rules,
            min_lookup_length=self.lookup.min_lookup_length,
        )

    def aggregator(self) -> PreviewAggregator:
        return PreviewAggregator(self.definitions, self.consumer, self.resolver())

    def set_context(
        self,
        *,
        campaign_record: dict[str, Any] | None = None,
        tactique_record: dict[str, Any] | None = None,
        placement_record: dict[str, Any] | None = None,
        form_data: dict[str, Any] | None = None,
    ) -> None:
        """Replace the given context layers; omitted layers are kept."""
        update = {}
        if campaign_record is not None:
            update["campaign_record"] = dict(campaign_record)
        if tactique_record is not None:
            update["tactique_record"] = dict(tactique_record)
        if placement_record is not None:
            update["placement_record"] = dict(placement_record)
        if form_data is not None:
            update["form_data"] = dict(form_data)
        if not update:
            return
        self._context = self._context.model_copy(update=update)
        self._changed()

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # ---- loading ----

    async def load_definitions(self, selection: Mapping[TaxonomyGroup | str, str | None]) -> bool:
        """
        Load the taxonomies selected for each group.

        A failed load sets ``load_error`` and keeps whatever was loaded before
        for that group; ``retry_load`` tries the same selection again. Keys
        that are not a taxonomy group are skipped and reported in
        ``load_error``.

        Returns:
            True when every selected taxonomy loaded
        """
        self.selection = {}
        self.unknown_groups = []
        valid = {g.value for g in TaxonomyGroup}
        for key, tid in selection.items():
            name = key.value if isinstance(key, TaxonomyGroup) else str(key)
            if name not in valid:
                self.unknown_groups.append(name)
            elif tid:
                self.selection[TaxonomyGroup(name)] = str(tid)
        if self.unknown_groups:
            logger.warning("Ignoring unknown taxonomy groups: %s", self.unknown_groups)
        return await self._load_selected()

    async def retry_load(self) -> bool:
        logger.info("Retrying taxonomy load for %s", {g.value: t for g, t in self.selection.items()})
        return await self._load_selected()

    async def _load_selected(self) -> bool:
        loaded: dict[TaxonomyGroup, TaxonomyDefinition] = {}
        errors: list[str] = [f"{name}: unknown taxonomy group" for name in self.unknown_groups]

        for group, taxonomy_id in self.selection.items():
            try:
                doc = await self.store.get_taxonomy(self.client_id, taxonomy_id)
                if doc is None:
                    errors.append(f"{group.value}: taxonomy {taxonomy_id!r} not found")
                    continue
                loaded[group] = parse_taxonomy_definition(doc, taxonomy_id)
            except (StoreError, ValueError) as e:
                logger.warning("Failed to load %s taxonomy %s: %s", group.value, taxonomy_id, e)
                errors.append(f"{group.value}: {e}")

        if errors:
            self.load_error = "; ".join(errors)
            previous = self.definitions
            self.definitions = {
                g: loaded.get(g) or previous[g] for g in self.selection if g in loaded or g in previous
            }
            logger.warning("Taxonomy load incomplete: %s", self.load_error)
        else:
            self.load_error = None
            self.definitions = loaded
            logger.info(
                "Loaded %d taxonomies for %s: %s",
                len(loaded),
                self.consumer.value,
                {g.value: d.id for g, d in loaded.items()},
            )

        self.variables = collect_variables(self.definitions, self.consumer, self.rules)
        self._changed()

        if self.lookup.prefetch_options:
            await self.load_field_options()
        return self.load_error is None

    async def load_overrides(self) -> bool:
        """Load the client's custom codes into the shared cache."""
        try:
            overrides = await self.store.list_custom_overrides(self.client_id)
        except StoreError as e:
            logger.warning("Failed to load custom codes for client %s: %s", self.client_id, e)
            return False
        self.cache.set_overrides(overrides)
        return True

    async def load_field_options(self) -> None:
        """Load the catalog list of every manual variable and seed the cache with its entities."""
        options: dict[str, list[CatalogOption]] = {}
        for var in manual_variables(self.variables):
            try:
                ids = await self.store.list_options(self.client_id, var.name)
                entities = await self.store.list_references(ids)
            except StoreError as e:
                logger.warning("Failed to load options for %s: %s", var.name, e)
                continue
            if not entities:
                continue
            self.cache.put_many(entities)
            options[var.name] = [CatalogOption.from_entity(e) for e in entities]
        self.options = options
        logger.debug("Loaded option lists for %d variables", len(options))
        self._changed()

    async def settle(self) -> dict[TaxonomyGroup, GroupPreview]:
        """Render, then wait for every lookup the render triggered, until previews are final."""
        previews = self.previews()
        while self.cache.has_pending:
            await self.cache.drain()
            previews = self.previews()
        return previews

    # ---- previews ----

    def previews(self) -> dict[TaxonomyGroup, GroupPreview]:
        key = (self._revision, self.coordinator.revision, self.cache.revision)
        if self._memo is not None and self._memo[0] == key:
            return self._memo[1]
        previews = self.aggregator().previews()
        self._memo = (key, previews)
        return previews

    def render_group(self, group: TaxonomyGroup) -> GroupPreview | None:
        return self.previews().get(group)

    def get_group_preview(self, group: TaxonomyGroup) -> str:
        preview = self.render_group(group)
        return preview.text if preview is not None else ""

    def get_resolved_value(self, name: str, fmt: TaxonomyFormat) -> str:
        return self.resolver().resolved_text(name, fmt)

    def get_editable_variables(self) -> list[VariableToken]:
        return list(self.variables)

    def contains_variable(self, group: TaxonomyGroup, name: str) -> bool:
        return self.aggregator().contains_variable(group, name)

    def highlighted_groups(self) -> list[TaxonomyGroup]:
        return self.aggregator().highlighted_groups(self.highlight)

    def completion(self) -> tuple[int, int]:
        previews = self.previews().values()
        return sum(p.resolved_count for p in previews), sum(p.token_count for p in previews)

    def generate_fields(self) -> dict[str, Any]:
        """Saved tag-string fields for the current state (see ``generate_taxonomy_fields``)."""
        return generate_taxonomy_fields(self.definitions, self.consumer, self.resolver().resolve)

    # ---- editing ----

    def on_field_change(
        self,
        name: str,
        value: str,
        fmt: TaxonomyFormat,
        reference_id: str | None = None,
    ) -> None:
        self.coordinator.on_field_change(name, value, fmt, reference_id)

    def on_highlight(self, name: str | None) -> None:
        if self.highlight.active_variable == name:
            return
        self.highlight = HighlightState(active_variable=name)
        self._notify()

    def _default_format(self, name: str) -> TaxonomyFormat:
        for var in self.variables:
            if var.name == name and var.formats:
                return var.formats[0]
        return TaxonomyFormat.OPEN

    def editor_state(self, name: str) -> EditorState:
        return self.coordinator.editor_state(name, self.options.get(name, ()))

    def edit_field(self, name: str, text: str, fmt: TaxonomyFormat | None = None) -> EditorState:
        fmt = fmt or self._default_format(name)
        return self.coordinator.edit_text(name, text, fmt, self.options.get(name, ()))

    def select_option(self, name: str, option_id: str, fmt: TaxonomyFormat | None = None) -> EditorState:
        for option in self.options.get(name, ()):
            if option.id == option_id:
                return self.coordinator.select_option(name, option, fmt or self._default_format(name))
        raise KeyError(f"No option {option_id!r} for variable {name!r}")

    def field_states(self) -> list[FieldState]:
        """States of the fields the user fills in, in editable-variable order."""
        resolver = self.resolver()
        overlay = self.coordinator.overlay
        states = []
        for var in manual_variables(self.variables):
            fmt = var.formats[0] if var.formats else TaxonomyFormat.OPEN
            states.append(
                FieldState(
                    variable=var,
                    preview=resolver.resolved_text(var.name, fmt),
                    editor=self.editor_state(var.name),
                    manual=overlay.get(var.name),
                    options=list(self.options.get(var.name, [])),
                    highlighted=self.highlight.active_variable == var.name,
                )
            )
        return states

    def taxonomy_values(self) -> dict[str, dict[str, str]]:
        """Overlay serialised for the form-state container."""
        return self.coordinator.to_record()

    # ---- notifications ----

    def close(self) -> None:
        """Detach from a cache shared with other sessions."""
        self._remove_cache_listener()
        self._listeners.clear()

    def _changed(self) -> None:
        self._revision += 1
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def _on_cache_change(self, ref_id: str | None) -> None:
        self._notify()

    def _on_overlay_change(self, name: str, overlay: Mapping[str, ManualValue]) -> None:
        self._notify()
