"""
Configuration management: models, loading, and validation.

Handles:
- EngineConfig: Main engine configuration
- LookupConfig: Reference catalog lookup settings
- Source rules loading from YAML
- Environment variable overrides

The loader module performs file I/O; models are pure Pydantic classes.
"""

from infrastructure.config.loader import load_engine_config, load_source_rules
from infrastructure.config.models import EngineConfig, LookupConfig, StoreKind

__all__ = [
    # Main config (most commonly used)
    "EngineConfig",
    "load_engine_config",
    # Enums
    "StoreKind",
    # Lookup
    "LookupConfig",
    # Loaders
    "load_source_rules",
]
