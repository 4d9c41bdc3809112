"""Filesystem utility functions."""

import json
from pathlib import Path
from typing import Any

import yaml


def ensure_exists(path: Path, what: str) -> None:
    """
    Check that a path exists, raise FileNotFoundError if not.

    Args:
        path: Path to check
        what: Description of what this path represents (for error message)

    Raises:
        FileNotFoundError: If path does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Missing {what} at: {path}")


def read_document(path: Path) -> Any:
    """
    Read a YAML or JSON document.

    Args:
        path: ``.yaml``/``.yml`` or ``.json`` file

    Returns:
        Parsed content (None for an empty YAML file)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the extension is not supported
    """
    ensure_exists(path, "document")
    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(f)
        if suffix == ".json":
            return json.load(f)
    raise ValueError(f"Unsupported document format: {suffix}. Supported formats: .yaml, .yml, .json")


def write_document(path: Path, data: Any) -> None:
    """Write ``data`` as YAML or JSON depending on the extension, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            json.dump(data, f, ensure_ascii=False, indent=2)
        else:
            yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
