"""In-memory taxonomy store, used by tests and demos."""

import logging
from collections.abc import Mapping
from typing import Any

from domain.schemas import CustomOverride, ReferenceEntity
from infrastructure.config.models import EngineConfig
from infrastructure.store.base import RecordKind, StoreError, TaxonomyStore

logger = logging.getLogger(__name__)


class MemoryStore(TaxonomyStore):
    """Store backed by plain dicts. Ids listed in ``failing`` raise StoreError."""

    def __init__(
        self,
        *,
        taxonomies: Mapping[str, Mapping[str, dict[str, Any]]] | None = None,
        records: Mapping[RecordKind, Mapping[str, dict[str, Any]]] | None = None,
        references: Mapping[str, ReferenceEntity | dict[str, Any]] | None = None,
        overrides: Mapping[str, list[CustomOverride | dict[str, Any]]] | None = None,
        options: Mapping[str, Mapping[str, list[str]]] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.taxonomies = {c: dict(docs) for c, docs in (taxonomies or {}).items()}
        self.records = {RecordKind(k): dict(docs) for k, docs in (records or {}).items()}
        self.references = {
            ref_id: e if isinstance(e, ReferenceEntity) else ReferenceEntity.model_validate({**e, "id": ref_id})
            for ref_id, e in (references or {}).items()
        }
        self.overrides = {
            c: [o if isinstance(o, CustomOverride) else CustomOverride.model_validate(o) for o in items]
            for c, items in (overrides or {}).items()
        }
        self.options = {c: {v: list(ids) for v, ids in lists.items()} for c, lists in (options or {}).items()}
        self.failing = set(failing or ())
        self.reference_calls: list[str] = []

    @classmethod
    def from_cfg(cls, cfg: EngineConfig) -> "MemoryStore":
        logger.info("Initialized in-memory store for client %s (no documents loaded)", cfg.client_id)
        return cls()

    def _check(self, key: str) -> None:
        if key in self.failing:
            raise StoreError(f"Simulated failure reading {key!r}")

    async def get_taxonomy(self, client_id: str, taxonomy_id: str) -> dict[str, Any] | None:
        self._check(taxonomy_id)
        doc = self.taxonomies.get(client_id, {}).get(taxonomy_id)
        if doc is None:
            return None
        return {"id": taxonomy_id, **doc}

    async def get_record(self, kind: RecordKind, record_id: str) -> dict[str, Any] | None:
        self._check(record_id)
        doc = self.records.get(kind, {}).get(record_id)
        return dict(doc) if doc is not None else None

    async def get_reference(self, ref_id: str) -> ReferenceEntity | None:
        self.reference_calls.append(ref_id)
        self._check(ref_id)
        return self.references.get(ref_id)

    async def list_custom_overrides(self, client_id: str) -> list[CustomOverride]:
        self._check(client_id)
        return list(self.overrides.get(client_id, []))

    async def list_options(self, client_id: str, variable: str) -> list[str]:
        self._check(variable)
        return list(self.options.get(client_id, {}).get(variable, []))
