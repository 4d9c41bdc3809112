import asyncio
from pathlib import Path

import pytest

from domain.taxonomy.loader import parse_taxonomy_definition
from infrastructure.store.base import RecordKind, StoreError
from infrastructure.store.file import FileStore


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    client = tmp_path / "clients" / "acme"
    _write(client / "taxonomies" / "t1.yaml", "NA_Name_Level_1: '[CA_Name:open]'\nNA_Name_Level_1_Title: Name\n")
    _write(client / "taxonomies" / "bad.yaml", "a: [1, 2\n")
    _write(client / "taxonomies" / "listed.yaml", "- 1\n")
    _write(client / "custom_codes.yaml", "- CC_Shortcode_ID: pub1\n  CC_Custom_Code: X\n")
    _write(client / "lists" / "PL_Audience.yaml", "- pub1\n- pub2\n")
    _write(tmp_path / "references.yaml", "pub1:\n  SH_Code: P1\n")
    _write(tmp_path / "records" / "campaign" / "c1.json", '{"CA_Name": "N"}')
    return tmp_path


def test_reads_taxonomy_documents(data_dir: Path) -> None:
    store = FileStore(data_dir)

    doc = asyncio.run(store.get_taxonomy("acme", "t1"))
    definition = parse_taxonomy_definition(doc)

    assert definition.id == "t1"
    assert definition.level(1).title == "Name"
    assert asyncio.run(store.get_taxonomy("acme", "absent")) is None


def test_decoding_errors_raise_store_error(data_dir: Path) -> None:
    store = FileStore(data_dir)

    with pytest.raises(StoreError):
        asyncio.run(store.get_taxonomy("acme", "bad"))
    with pytest.raises(StoreError, match="Expected a mapping"):
        asyncio.run(store.get_taxonomy("acme", "listed"))


def test_references_overrides_and_options(data_dir: Path) -> None:
    store = FileStore(data_dir)

    entity = asyncio.run(store.get_reference("pub1"))
    assert entity.code == "P1"
    assert entity.display_name_fr == "P1"
    assert asyncio.run(store.get_reference("pub2")) is None

    overrides = asyncio.run(store.list_custom_overrides("acme"))
    assert overrides[0].reference_id == "pub1"
    assert overrides[0].custom_code == "X"
    assert asyncio.run(store.list_custom_overrides("other")) == []

    ids = asyncio.run(store.list_options("acme", "PL_Audience"))
    assert ids == ["pub1", "pub2"]
    assert [e.id for e in asyncio.run(store.list_references(ids))] == ["pub1"]
    assert asyncio.run(store.list_options("acme", "PL_Nothing")) == []


def test_records_accept_json(data_dir: Path) -> None:
    store = FileStore(data_dir)
    assert asyncio.run(store.get_record(RecordKind.CAMPAIGN, "c1")) == {"CA_Name": "N"}
    assert asyncio.run(store.get_record(RecordKind.TACTIQUE, "t1")) is None
