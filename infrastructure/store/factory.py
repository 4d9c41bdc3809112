"""Factory for creating taxonomy stores."""

import logging

from infrastructure.config.models import EngineConfig, StoreKind

from .base import TaxonomyStore
from .file import FileStore
from .memory import MemoryStore

logger = logging.getLogger(__name__)

STORES: dict[StoreKind, type[TaxonomyStore]] = {
    StoreKind.FILE: FileStore,
    StoreKind.MEMORY: MemoryStore,
}


def make_store(cfg: EngineConfig) -> TaxonomyStore:
    """
    Build the store selected by ``cfg.store``.

    Raises:
        RuntimeError: If no store class is mapped to the kind.
    """
    store_cls = STORES.get(cfg.store)
    if store_cls is None:
        raise RuntimeError(f"Unsupported store kind: {cfg.store.value}")

    logger.debug("Building %s store (%s)", cfg.store.value, store_cls.__name__)
    return store_cls.from_cfg(cfg)  # type: ignore[attr-defined]
