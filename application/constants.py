"""Application-level constants."""

from pathlib import Path

from domain.schemas import ConsumerType, TaxonomyGroup

# Record field prefixes per consumer
FIELD_PREFIX = {
    ConsumerType.PLACEMENT: "PL",
    ConsumerType.CREATIF: "CR",
}

# Saved level string fields, e.g. PL_Tag_1, CR_MO_6
LEVEL_FIELD_STEM = {
    TaxonomyGroup.TAGS: "Tag",
    TaxonomyGroup.PLATFORM: "Plateforme",
    TaxonomyGroup.MEDIAOCEAN: "MO",
}

# Fields holding the selected taxonomy id, e.g. PL_Taxonomy_Tags
TAXONOMY_ID_FIELD_STEM = {
    TaxonomyGroup.TAGS: "Taxonomy_Tags",
    TaxonomyGroup.PLATFORM: "Taxonomy_Platform",
    TaxonomyGroup.MEDIAOCEAN: "Taxonomy_MediaOcean",
}

TAXONOMY_VALUES_STEM = "Taxonomy_Values"
GENERATED_TAXONOMIES_STEM = "Generated_Taxonomies"

# Keys for serialization
ORIGINAL_INDEX_KEY = "og_index"
RECORD_ID_KEY = "id"
TAXONOMIES_KEY = "taxonomies"
ERROR_KEY = "error"

# Output filenames
REGENERATED_FILENAME = "regenerated_taxonomies.json"
CONFIG_SNAPSHOT_FILENAME = "config.resolved.json"

# Output directory structure
OUTPUT_ROOT = Path("outputs")
LOG_FILENAME = "run.log"


def taxonomy_id_field(consumer: ConsumerType, group: TaxonomyGroup) -> str:
    return f"{FIELD_PREFIX[consumer]}_{TAXONOMY_ID_FIELD_STEM[group]}"


def level_field(consumer: ConsumerType, group: TaxonomyGroup, number: int) -> str:
    return f"{FIELD_PREFIX[consumer]}_{LEVEL_FIELD_STEM[group]}_{number}"


def taxonomy_values_field(consumer: ConsumerType) -> str:
    return f"{FIELD_PREFIX[consumer]}_{TAXONOMY_VALUES_STEM}"


def generated_taxonomies_field(consumer: ConsumerType) -> str:
    return f"{FIELD_PREFIX[consumer]}_{GENERATED_TAXONOMIES_STEM}"
