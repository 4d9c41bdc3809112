"""YAML/JSON document store over a local data directory.

Layout under ``data_dir``::

    references.yaml                          # id -> entity fields
    records/<kind>/<record_id>.yaml
    clients/<client_id>/taxonomies/<taxonomy_id>.yaml
    clients/<client_id>/custom_codes.yaml    # list of overrides
    clients/<client_id>/lists/<variable>.yaml  # list of reference ids
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from domain.schemas import CustomOverride, ReferenceEntity
from infrastructure.config.models import EngineConfig
from infrastructure.constants import (
    CLIENTS_DIRNAME,
    CUSTOM_CODES_FILENAME,
    LISTS_DIRNAME,
    RECORDS_DIRNAME,
    REFERENCES_FILENAME,
    TAXONOMIES_DIRNAME,
)
from infrastructure.io.fs import read_document
from infrastructure.store.base import RecordKind, StoreError, TaxonomyStore

logger = logging.getLogger(__name__)

_SUFFIXES = (".yaml", ".yml", ".json")


class FileStore(TaxonomyStore):
    """Reads documents from disk in a worker thread so the event loop never blocks."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self._references: dict[str, ReferenceEntity] | None = None

    @classmethod
    def from_cfg(cls, cfg: EngineConfig) -> "FileStore":
        if not cfg.data_dir.exists():
            raise FileNotFoundError(f"Data directory not found: {cfg.data_dir}")
        logger.info("Initialized file store at %s", cfg.data_dir)
        return cls(cfg.data_dir)

    def _client_dir(self, client_id: str) -> Path:
        return self.data_dir / CLIENTS_DIRNAME / client_id

    @staticmethod
    def _find(stem: Path) -> Path | None:
        for suffix in _SUFFIXES:
            candidate = stem.with_name(stem.name + suffix)
            if candidate.exists():
                return candidate
        return None

    async def _read(self, path: Path | None) -> Any:
        if path is None:
            return None
        try:
            return await asyncio.to_thread(read_document, path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise StoreError(f"Failed to read {path}: {e}") from e

    async def _read_mapping(self, stem: Path) -> dict[str, Any] | None:
        path = self._find(stem)
        data = await self._read(path)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise StoreError(f"Expected a mapping in {path}, got {type(data).__name__}")
        return data

    async def get_taxonomy(self, client_id: str, taxonomy_id: str) -> dict[str, Any] | None:
        doc = await self._read_mapping(self._client_dir(client_id) / TAXONOMIES_DIRNAME / taxonomy_id)
        if doc is None:
            return None
        return {"id": taxonomy_id, **doc}

    async def get_record(self, kind: RecordKind, record_id: str) -> dict[str, Any] | None:
        return await self._read_mapping(self.data_dir / RECORDS_DIRNAME / kind.value / record_id)

    async def _load_references(self) -> dict[str, ReferenceEntity]:
        if self._references is not None:
            return self._references
        path = self.data_dir / REFERENCES_FILENAME
        data = await self._read(path) if path.exists() else None
        if data is not None and not isinstance(data, dict):
            raise StoreError(f"Expected a mapping in {path}, got {type(data).__name__}")
        references: dict[str, ReferenceEntity] = {}
        for ref_id, fields in (data or {}).items():
            try:
                references[str(ref_id)] = ReferenceEntity(id=str(ref_id), **(fields or {}))
            except (TypeError, ValidationError) as e:
                raise StoreError(f"Invalid reference {ref_id!r} in {REFERENCES_FILENAME}: {e}") from e
        self._references = references
        logger.debug("Loaded %d reference entities from %s", len(references), self.data_dir)
        return references

    async def get_reference(self, ref_id: str) -> ReferenceEntity | None:
        references = await self._load_references()
        return references.get(ref_id)

    async def list_custom_overrides(self, client_id: str) -> list[CustomOverride]:
        path = self._client_dir(client_id) / CUSTOM_CODES_FILENAME
        data = await self._read(path) if path.exists() else None
        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreError(f"Expected a list in {path}, got {type(data).__name__}")
        try:
            return [CustomOverride.model_validate(item) for item in data]
        except ValidationError as e:
            raise StoreError(f"Invalid custom code in {path}: {e}") from e

    async def list_options(self, client_id: str, variable: str) -> list[str]:
        path = self._find(self._client_dir(client_id) / LISTS_DIRNAME / variable)
        data = await self._read(path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreError(f"Expected a list of ids in {path}, got {type(data).__name__}")
        return [str(item) for item in data]
