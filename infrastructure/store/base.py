"""Base interface for taxonomy document stores."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from enum import Enum
from typing import Any

from domain.schemas import CustomOverride, ReferenceEntity

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """A store could not read or decode a document."""


class RecordKind(str, Enum):
    """Kinds of hierarchy records a taxonomy is resolved against."""

    CAMPAIGN = "campaign"
    TACTIQUE = "tactique"
    PLACEMENT = "placement"
    CREATIF = "creatif"


class TaxonomyStore(ABC):
    """
    Abstract base class for document stores.

    All concrete stores must implement the async read operations below.
    Missing documents return ``None`` (or an empty list); I/O or decoding
    failures raise ``StoreError``.
    """

    @abstractmethod
    async def get_taxonomy(self, client_id: str, taxonomy_id: str) -> dict[str, Any] | None:
        """Raw taxonomy document (``NA_Name_Level_N`` layout or ``levels`` list)."""
        raise NotImplementedError

    @abstractmethod
    async def get_record(self, kind: RecordKind, record_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    async def get_reference(self, ref_id: str) -> ReferenceEntity | None:
        raise NotImplementedError

    @abstractmethod
    async def list_custom_overrides(self, client_id: str) -> list[CustomOverride]:
        raise NotImplementedError

    @abstractmethod
    async def list_options(self, client_id: str, variable: str) -> list[str]:
        """Reference ids offered as choices for a manual variable."""
        raise NotImplementedError

    async def list_references(self, ref_ids: Iterable[str]) -> list[ReferenceEntity]:
        """Entities for the given ids, skipping unknown ones."""
        entities = []
        for ref_id in ref_ids:
            entity = await self.get_reference(ref_id)
            if entity is not None:
                entities.append(entity)
        return entities
