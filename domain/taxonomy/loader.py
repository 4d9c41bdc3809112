"""Parse source rules and taxonomy definitions from pre-loaded documents."""

from typing import Any

from domain.schemas import MAX_LEVELS, Level, TaxonomyDefinition
from domain.taxonomy.classifier import SourceRules


def parse_source_rules(data: dict[str, Any]) -> SourceRules:
    """
    Parse pre-loaded YAML dict into SourceRules.

    This is a pure function - it does NOT perform file I/O.
    The YAML loading happens in infrastructure.config.loader.

    Args:
        data: Dictionary from yaml.safe_load()

    Returns:
        SourceRules; keys that are absent keep their defaults

    Raises:
        ValueError: If a key has the wrong type
    """
    kwargs: dict[str, list[str]] = {}
    for key in ("campaign", "tactique", "placement_prefixes", "creatif_prefixes"):
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if not isinstance(value, list):
            raise ValueError(f"{key} must be a list")
        kwargs[key] = [str(v).strip() for v in value if str(v).strip()]
    return SourceRules(**kwargs)


def parse_taxonomy_definition(record: dict[str, Any], taxonomy_id: str | None = None) -> TaxonomyDefinition:
    """
    Build a TaxonomyDefinition from a stored taxonomy document.

    Accepts either the flat stored layout (``NA_Name_Level_1`` ... ``NA_Name_Level_6``
    with ``NA_Name_Level_N_Title``) or an explicit ``levels`` list.

    Args:
        record: Stored document
        taxonomy_id: Id to use when the document does not carry one

    Returns:
        TaxonomyDefinition with empty levels left out

    Raises:
        ValueError: If no id is available or ``levels`` is not a list
    """
    ref_id = str(record.get("id") or taxonomy_id or "").strip()
    if not ref_id:
        raise ValueError("taxonomy record has no id")

    display_name = str(record.get("display_name") or record.get("NA_Display_Name") or "")

    if "levels" in record:
        raw_levels = record["levels"] or []
        if not isinstance(raw_levels, list):
            raise ValueError(f"levels must be a list in taxonomy {ref_id!r}")
        levels = [Level(**lvl) for lvl in raw_levels]
        return TaxonomyDefinition(id=ref_id, display_name=display_name, levels=levels)

    levels = []
    for n in range(1, MAX_LEVELS + 1):
        template = record.get(f"NA_Name_Level_{n}") or ""
        if not template:
            continue
        title = record.get(f"NA_Name_Level_{n}_Title") or ""
        levels.append(Level(number=n, title=str(title), template=str(template)))
    return TaxonomyDefinition(id=ref_id, display_name=display_name, levels=levels)
