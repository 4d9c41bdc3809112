"""Configuration loading from YAML files."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from domain.taxonomy.classifier import SourceRules
from domain.taxonomy.loader import parse_source_rules
from infrastructure.config.models import EngineConfig, LookupConfig, StoreKind
from infrastructure.constants import (
    DATA_DIR,
    ENV_CLIENT_ID,
    ENV_DATA_DIR,
    FIELD_SOURCES_FILE,
    OUTPUT_DIR,
)

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML dict in {path}, got {type(data)}")

    return data


def load_source_rules(path: Path) -> SourceRules:
    """
    Load variable source rules from YAML file.

    This function handles file I/O, then delegates parsing to domain layer.
    """
    data = _load_yaml(path)
    try:
        return parse_source_rules(data)
    except ValueError as e:
        raise ValueError(f"Invalid source rules in {path}: {e}") from e


def load_engine_config(engine_path: Path, *, env: dict[str, str] | None = None) -> EngineConfig:
    """
    Load engine.yaml and construct a fully-resolved EngineConfig.

    ``TAXONOMY_CLIENT_ID`` and ``TAXONOMY_DATA_DIR`` in the environment take
    precedence over the YAML values. Source rules are read from
    ``field_sources_file`` when that file exists; otherwise the built-in
    rules apply.

    Args:
        engine_path: Path to engine.yaml
        env: Environment mapping (defaults to os.environ)

    Returns:
        EngineConfig

    Raises:
        FileNotFoundError: If engine.yaml is missing
        ValueError: If a key is missing or has an invalid value
    """
    env = dict(os.environ) if env is None else env
    data = _load_yaml(engine_path)

    client_id = env.get(ENV_CLIENT_ID) or data.get("client_id")
    if not client_id:
        raise ValueError(f"engine.yaml missing required key: client_id ({engine_path})")

    store_raw = str(data.get("store", StoreKind.FILE.value)).strip().lower()
    try:
        store = StoreKind(store_raw)
    except ValueError as e:
        raise ValueError(f"Invalid store value {store_raw!r} in {engine_path}") from e

    data_dir = Path(env.get(ENV_DATA_DIR) or data.get("data_dir") or DATA_DIR)
    output_dir = Path(data.get("output_dir") or OUTPUT_DIR)
    field_sources_file = Path(data.get("field_sources_file") or FIELD_SOURCES_FILE)

    lookup_raw = data.get("lookup") or {}
    if not isinstance(lookup_raw, dict):
        raise ValueError(f"engine.yaml 'lookup' must be a mapping: {engine_path}")
    lookup = LookupConfig(**lookup_raw)

    if field_sources_file.exists():
        source_rules = load_source_rules(field_sources_file)
    else:
        logger.info("No source rules at %s; using built-in field lists", field_sources_file)
        source_rules = SourceRules()

    table_file = data.get("table_file")

    cfg = EngineConfig(
        client_id=str(client_id),
        store=store,
        data_dir=data_dir,
        output_dir=output_dir,
        consumer=data.get("consumer", "placement"),
        lookup=lookup,
        field_sources_file=field_sources_file,
        source_rules=source_rules,
        table_file=Path(table_file) if table_file else None,
    )

    return cfg
