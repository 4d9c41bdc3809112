"""
Taxonomy document stores.

Implements the adapter pattern for different document backends:
- File (YAML/JSON documents under a data directory)
- Memory (for testing)

All stores implement the TaxonomyStore interface.
"""

from infrastructure.store.base import RecordKind, StoreError, TaxonomyStore
from infrastructure.store.factory import make_store
from infrastructure.store.file import FileStore
from infrastructure.store.memory import MemoryStore

__all__ = [
    # Abstract base
    "TaxonomyStore",
    "StoreError",
    "RecordKind",
    # Concrete implementations
    "FileStore",
    "MemoryStore",
    # Factory (most commonly used)
    "make_store",
]
