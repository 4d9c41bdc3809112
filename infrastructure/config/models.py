"""Configuration models (Pydantic classes)."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from domain.schemas import ConsumerType
from domain.taxonomy.classifier import SourceRules
from infrastructure.constants import DATA_DIR, FIELD_SOURCES_FILE, OUTPUT_DIR


class StoreKind(str, Enum):
    """Supported taxonomy store backends."""

    MEMORY = "memory"
    FILE = "file"


class LookupConfig(BaseModel):
    """Reference catalog lookup settings."""

    min_lookup_length: int = Field(
        default=5,
        ge=0,
        description="Inherited values longer than this, without whitespace, are looked up in the catalog.",
    )
    prefetch_options: bool = Field(
        default=True,
        description="Load each manual variable's option list (and its entities) when definitions load.",
    )


class EngineConfig(BaseModel):
    """
    Runtime configuration.
    - Loaded from engine.yaml
    - Environment overrides applied by the loader
    - Source rules resolved from field_sources.yaml by the loader
    """

    client_id: str = Field(..., description="Client whose taxonomies, lists and custom codes are used.")
    store: StoreKind = Field(default=StoreKind.FILE, description="Store backend holding taxonomy documents.")
    data_dir: Path = Field(default_factory=lambda: DATA_DIR)
    output_dir: Path = Field(default_factory=lambda: OUTPUT_DIR)
    consumer: ConsumerType = ConsumerType.PLACEMENT

    lookup: LookupConfig = Field(default_factory=LookupConfig)

    # Source rules (resolved by loader)
    field_sources_file: Path = Field(default_factory=lambda: FIELD_SOURCES_FILE)
    source_rules: SourceRules = Field(default_factory=SourceRules)

    # Optional batch input
    table_file: Path | None = Field(
        default=None,
        description="Table (CSV or Excel) of records to regenerate taxonomies for.",
    )

    @model_validator(mode="after")
    def _validate(self) -> "EngineConfig":
        self.client_id = str(self.client_id).strip()
        if not self.client_id:
            raise ValueError("client_id is required in engine.yaml (or TAXONOMY_CLIENT_ID)")
        return self
