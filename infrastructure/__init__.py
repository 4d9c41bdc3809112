"""
Infrastructure layer: External dependencies and I/O boundaries.

Contains adapters for:
- Document stores (file, memory)
- Configuration loading (YAML, environment)
- Record tables (CSV, Excel)
- Observability (logging)

This is the only layer that performs I/O operations.
"""

# Most commonly used - exposed at top level for convenience
from infrastructure.config import (
    EngineConfig,
    StoreKind,
    load_engine_config,
)
from infrastructure.store import TaxonomyStore, make_store

__all__ = [
    # Stores (most commonly used)
    "make_store",
    "TaxonomyStore",
    # Configuration (most commonly used)
    "load_engine_config",
    "EngineConfig",
    "StoreKind",
]
