"""Manual field editing: per-field editor state and the session overlay."""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel

from domain.schemas import ManualValue, ReferenceEntity, TaxonomyFormat

logger = logging.getLogger(__name__)

OverlayCallback = Callable[[str, Mapping[str, ManualValue]], None]


class CatalogOption(BaseModel):
    """One pickable entry of a variable's catalog list."""

    id: str
    label: str
    code: str = ""

    @classmethod
    def from_entity(cls, entity: ReferenceEntity) -> "CatalogOption":
        return cls(id=entity.id, label=entity.display_name_fr, code=entity.code)


@dataclass(frozen=True)
class FreeText:
    text: str = ""


@dataclass(frozen=True)
class CatalogSelected:
    reference_id: str
    label: str


EditorState = FreeText | CatalogSelected


def match_option(text: str, options: Iterable[CatalogOption]) -> CatalogOption | None:
    """Option whose id matches exactly, else whose label matches ignoring case."""
    needle = text.strip()
    if not needle:
        return None
    options = list(options)
    for opt in options:
        if opt.id == needle:
            return opt
    lowered = needle.casefold()
    for opt in options:
        if opt.label.strip().casefold() == lowered:
            return opt
    return None


def initial_editor_state(value: ManualValue | None, options: Iterable[CatalogOption] = ()) -> EditorState:
    """Editor state for a field as it is first shown."""
    if value is None:
        return FreeText("")
    opt = match_option(value.value_of_record, options)
    if opt is not None:
        return CatalogSelected(reference_id=opt.id, label=opt.label)
    return FreeText(value.open_text or value.raw_value)


def transition(state: EditorState, text: str, options: Iterable[CatalogOption] = ()) -> EditorState:
    """
    Next editor state after the user typed ``text``.

    Empty text always returns to ``FreeText("")``; text matching an option
    switches to ``CatalogSelected``; anything else is free text.
    """
    if not text.strip():
        return FreeText("")
    opt = match_option(text, options)
    if opt is not None:
        return CatalogSelected(reference_id=opt.id, label=opt.label)
    return FreeText(text)


class FieldChangeCoordinator:
    """
    Owns the manual overlay of one editing session.

    The overlay is replaced as a whole on every write; readers only ever see
    a read-only mapping, so a snapshot taken before a write never changes.
    """

    def __init__(self, overlay: Mapping[str, ManualValue] | None = None):
        self._overlay: Mapping[str, ManualValue] = MappingProxyType(dict(overlay or {}))
        self._states: dict[str, EditorState] = {}
        self._subscribers: list[OverlayCallback] = []
        self.revision = 0

    @property
    def overlay(self) -> Mapping[str, ManualValue]:
        return self._overlay

    @classmethod
    def from_record(cls, record: Mapping[str, Any] | None) -> "FieldChangeCoordinator":
        """Rebuild an overlay saved by ``to_record`` (legacy keys accepted)."""
        overlay = {}
        for name, raw in (record or {}).items():
            if isinstance(raw, ManualValue):
                overlay[name] = raw
            elif isinstance(raw, Mapping):
                overlay[name] = ManualValue.model_validate(dict(raw))
            else:
                logger.warning("Ignoring stored value for %s: expected a mapping, got %s", name, type(raw).__name__)
        return cls(overlay)

    def subscribe(self, callback: OverlayCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def on_field_change(
        self,
        name: str,
        value: str,
        fmt: TaxonomyFormat,
        reference_id: str | None = None,
    ) -> Mapping[str, ManualValue]:
        """
        Record a manual value for a variable.

        Args:
            name: Variable name
            value: Literal text (or the picked option's label)
            fmt: Format of the field being edited
            reference_id: Catalog id when an option was picked; becomes the value of record

        Returns:
            The new overlay
        """
        if not (value or "").strip() and not reference_id:
            return self.clear(name)

        self._states.pop(name, None)
        manual = ManualValue(
            raw_value=value or reference_id or "",
            format=fmt,
            open_text=value if fmt is TaxonomyFormat.OPEN else None,
            reference_id=reference_id,
        )
        if self._overlay.get(name) == manual:
            return self._overlay

        updated = dict(self._overlay)
        updated[name] = manual
        self._replace(name, updated)
        return self._overlay

    def clear(self, name: str) -> Mapping[str, ManualValue]:
        """Drop the manual value so the inherited one shows again."""
        self._states.pop(name, None)
        if name not in self._overlay:
            return self._overlay
        updated = {k: v for k, v in self._overlay.items() if k != name}
        self._replace(name, updated)
        return self._overlay

    def edit_text(
        self,
        name: str,
        text: str,
        fmt: TaxonomyFormat,
        options: Iterable[CatalogOption] = (),
    ) -> EditorState:
        """Apply typed text through the editor state machine and write the overlay."""
        state = transition(self.editor_state(name, options), text, options)
        if isinstance(state, CatalogSelected):
            self.on_field_change(name, state.label, fmt, state.reference_id)
        elif state.text:
            self.on_field_change(name, state.text, fmt)
        else:
            self.clear(name)
        self._states[name] = state
        return state

    def select_option(self, name: str, option: CatalogOption, fmt: TaxonomyFormat) -> CatalogSelected:
        state = CatalogSelected(reference_id=option.id, label=option.label)
        self.on_field_change(name, option.label, fmt, option.id)
        self._states[name] = state
        return state

    def editor_state(self, name: str, options: Iterable[CatalogOption] = ()) -> EditorState:
        state = self._states.get(name)
        if state is not None:
            return state
        return initial_editor_state(self._overlay.get(name), options)

    def to_record(self) -> dict[str, dict[str, str]]:
        """Overlay in the stored ``*_Taxonomy_Values`` layout."""
        record = {}
        for name, manual in self._overlay.items():
            entry = {"value": manual.raw_value, "source": "manual", "format": manual.format.value}
            if manual.open_text is not None:
                entry["openValue"] = manual.open_text
            if manual.reference_id:
                entry["shortcodeId"] = manual.reference_id
            record[name] = entry
        return record

    def _replace(self, name: str, updated: dict[str, ManualValue]) -> None:
        self._overlay = MappingProxyType(updated)
        self.revision += 1
        logger.debug("Overlay updated for %s (%d values)", name, len(updated))
        for callback in list(self._subscribers):
            callback(name, self._overlay)
