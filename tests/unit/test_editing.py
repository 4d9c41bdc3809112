import pytest

from application.editing import (
    CatalogOption,
    CatalogSelected,
    FieldChangeCoordinator,
    FreeText,
    initial_editor_state,
    transition,
)
from domain.schemas import ManualValue, ReferenceEntity, TaxonomyFormat

OPTIONS = [
    CatalogOption(id="audYoung001", label="Jeunes"),
    CatalogOption(id="audFamily01", label="Familles"),
]


def test_catalog_option_from_entity() -> None:
    entity = ReferenceEntity(id="audYoung001", code="Y1824", display_name_fr="Jeunes")
    assert CatalogOption.from_entity(entity) == CatalogOption(id="audYoung001", label="Jeunes", code="Y1824")


def test_initial_editor_state() -> None:
    assert initial_editor_state(None, OPTIONS) == FreeText("")
    picked = ManualValue(raw_value="Jeunes", reference_id="audYoung001")
    assert initial_editor_state(picked, OPTIONS) == CatalogSelected("audYoung001", "Jeunes")
    assert initial_editor_state(picked, []) == FreeText("Jeunes")
    assert initial_editor_state(ManualValue(raw_value="hello"), OPTIONS) == FreeText("hello")


def test_transition() -> None:
    state = FreeText("")
    assert transition(state, "familles", OPTIONS) == CatalogSelected("audFamily01", "Familles")
    assert transition(state, "audYoung001", OPTIONS) == CatalogSelected("audYoung001", "Jeunes")
    assert transition(CatalogSelected("audYoung001", "Jeunes"), "other", OPTIONS) == FreeText("other")
    assert transition(CatalogSelected("audYoung001", "Jeunes"), "  ", OPTIONS) == FreeText("")


def test_overlay_is_replaced_not_mutated() -> None:
    coordinator = FieldChangeCoordinator()
    snapshot = coordinator.overlay

    coordinator.on_field_change("PL_Label", "abc", TaxonomyFormat.OPEN)

    assert "PL_Label" not in snapshot
    assert coordinator.overlay["PL_Label"] == ManualValue(raw_value="abc", open_text="abc")
    assert coordinator.revision == 1
    with pytest.raises(TypeError):
        coordinator.overlay["other"] = ManualValue(raw_value="x")


def test_reference_id_becomes_value_of_record() -> None:
    coordinator = FieldChangeCoordinator()
    coordinator.on_field_change("PL_Audience", "Jeunes", TaxonomyFormat.CODE, "audYoung001")

    manual = coordinator.overlay["PL_Audience"]
    assert manual.value_of_record == "audYoung001"
    assert manual.open_text is None


def test_empty_value_clears_entry() -> None:
    coordinator = FieldChangeCoordinator({"PL_Label": ManualValue(raw_value="abc")})
    events = []
    coordinator.subscribe(lambda name, overlay: events.append((name, dict(overlay))))

    coordinator.on_field_change("PL_Label", "", TaxonomyFormat.OPEN)
    coordinator.clear("PL_Label")

    assert "PL_Label" not in coordinator.overlay
    assert events == [("PL_Label", {})]


def test_same_value_does_not_notify() -> None:
    coordinator = FieldChangeCoordinator()
    events = []
    unsubscribe = coordinator.subscribe(lambda name, overlay: events.append(name))

    coordinator.on_field_change("PL_Label", "abc", TaxonomyFormat.OPEN)
    coordinator.on_field_change("PL_Label", "abc", TaxonomyFormat.OPEN)
    unsubscribe()
    coordinator.on_field_change("PL_Label", "def", TaxonomyFormat.OPEN)

    assert events == ["PL_Label"]


def test_edit_text_drives_state_machine() -> None:
    coordinator = FieldChangeCoordinator()

    state = coordinator.edit_text("PL_Audience", "jeunes", TaxonomyFormat.CODE, OPTIONS)
    assert state == CatalogSelected("audYoung001", "Jeunes")
    assert coordinator.overlay["PL_Audience"].reference_id == "audYoung001"
    assert coordinator.editor_state("PL_Audience", OPTIONS) == state

    state = coordinator.edit_text("PL_Audience", "", TaxonomyFormat.CODE, OPTIONS)
    assert state == FreeText("")
    assert "PL_Audience" not in coordinator.overlay


def test_record_round_trip_uses_stored_keys() -> None:
    coordinator = FieldChangeCoordinator()
    coordinator.on_field_change("PL_Label", "abc", TaxonomyFormat.OPEN)
    coordinator.select_option("PL_Audience", OPTIONS[0], TaxonomyFormat.CODE)

    record = coordinator.to_record()

    assert record["PL_Label"] == {"value": "abc", "source": "manual", "format": "open", "openValue": "abc"}
    assert record["PL_Audience"]["shortcodeId"] == "audYoung001"
    assert FieldChangeCoordinator.from_record(record).overlay == coordinator.overlay


def test_from_record_skips_non_mappings() -> None:
    coordinator = FieldChangeCoordinator.from_record({"PL_Label": "plain", "PL_Other": {"value": "x"}})
    assert list(coordinator.overlay) == ["PL_Other"]
