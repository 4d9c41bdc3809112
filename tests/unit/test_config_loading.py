from pathlib import Path

import pytest
from pydantic import ValidationError

from domain.schemas import ConsumerType, FieldSource
from infrastructure.config.loader import load_engine_config, load_source_rules
from infrastructure.config.models import EngineConfig, LookupConfig, StoreKind
from infrastructure.store.factory import make_store
from infrastructure.store.memory import MemoryStore


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_env_overrides_yaml_values(tmp_path: Path) -> None:
    rules = _write(tmp_path / "field_sources.yaml", "campaign: [CA_Custom]\n")
    engine = _write(
        tmp_path / "engine.yaml",
        "client_id: acme\n"
        "store: Memory\n"
        "consumer: creatif\n"
        f"field_sources_file: {rules.as_posix()}\n"
        "lookup:\n"
        "  min_lookup_length: 3\n",
    )

    cfg = load_engine_config(engine, env={"TAXONOMY_CLIENT_ID": "other", "TAXONOMY_DATA_DIR": str(tmp_path)})

    assert cfg.client_id == "other"
    assert cfg.data_dir == tmp_path
    assert cfg.store is StoreKind.MEMORY
    assert cfg.consumer is ConsumerType.CREATIF
    assert cfg.lookup.min_lookup_length == 3
    assert cfg.source_rules.classify("CA_Custom") is FieldSource.CAMPAIGN
    assert cfg.source_rules.classify("TC_Publisher") is FieldSource.TACTIQUE


def test_missing_rules_file_uses_builtin_lists(tmp_path: Path) -> None:
    engine = _write(
        tmp_path / "engine.yaml",
        f"client_id: acme\nfield_sources_file: {(tmp_path / 'none.yaml').as_posix()}\n",
    )

    cfg = load_engine_config(engine, env={})

    assert cfg.store is StoreKind.FILE
    assert cfg.source_rules.classify("CA_Name") is FieldSource.CAMPAIGN
    assert cfg.table_file is None


def test_missing_client_id_raises(tmp_path: Path) -> None:
    engine = _write(tmp_path / "engine.yaml", "store: file\n")
    with pytest.raises(ValueError, match="client_id"):
        load_engine_config(engine, env={})


def test_invalid_values_raise(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Invalid store"):
        load_engine_config(_write(tmp_path / "a.yaml", "client_id: acme\nstore: redis\n"), env={})
    with pytest.raises(ValueError, match="lookup"):
        load_engine_config(_write(tmp_path / "b.yaml", "client_id: acme\nlookup: 5\n"), env={})
    with pytest.raises(ValueError, match="Invalid source rules"):
        load_source_rules(_write(tmp_path / "rules.yaml", "tactique: TC_Publisher\n"))
    with pytest.raises(FileNotFoundError):
        load_engine_config(tmp_path / "missing.yaml", env={})


def test_model_validation() -> None:
    with pytest.raises(ValidationError):
        EngineConfig(client_id="   ")
    with pytest.raises(ValidationError):
        LookupConfig(min_lookup_length=-1)


def test_make_store_builds_configured_kind(tmp_path: Path) -> None:
    assert isinstance(make_store(EngineConfig(client_id="acme", store=StoreKind.MEMORY)), MemoryStore)

    with pytest.raises(FileNotFoundError):
        make_store(EngineConfig(client_id="acme", store=StoreKind.FILE, data_dir=tmp_path / "absent"))
