from pathlib import Path

# Repo-root conventional directories/files (overrideable via engine.yaml)
CONFIG_DIR = Path("configs")
ENGINE_FILE = CONFIG_DIR / "engine.yaml"
FIELD_SOURCES_FILE = CONFIG_DIR / "field_sources.yaml"

DATA_DIR = Path("data")
OUTPUT_DIR = Path("outputs")

# File store layout under DATA_DIR
CLIENTS_DIRNAME = "clients"
TAXONOMIES_DIRNAME = "taxonomies"
LISTS_DIRNAME = "lists"
RECORDS_DIRNAME = "records"
REFERENCES_FILENAME = "references.yaml"
CUSTOM_CODES_FILENAME = "custom_codes.yaml"

# Environment overrides
ENV_CLIENT_ID = "TAXONOMY_CLIENT_ID"
ENV_DATA_DIR = "TAXONOMY_DATA_DIR"
